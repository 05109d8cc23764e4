"""Unit tests for GamificationService (expense_gamification/services/gamification_service.py)"""
import asyncio
import json
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from expense_gamification.constants import PROFILE_STORAGE_KEY
from expense_gamification.exceptions import StorageTimeoutError
from expense_gamification.gamification.profile_store import ProfileStore
from expense_gamification.models.gamification import BudgetHealthTier, GamificationProfile
from expense_gamification.services.gamification_service import GamificationService
from expense_gamification.storage.memory_store import InMemoryKeyValueStore


class SlowSaveStore(InMemoryKeyValueStore):
    """In-memory store whose writes suspend for a while"""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def set(self, key, value):
        await asyncio.sleep(self.delay)
        await super().set(key, value)


def _ids(unlocked):
    return [entry.achievement.id for entry in unlocked]


async def _stored_profile(storage) -> GamificationProfile:
    return GamificationProfile.from_storage_json(await storage.get(PROFILE_STORAGE_KEY))


# ============================================================================
# Recording Activity
# ============================================================================

@pytest.mark.asyncio
async def test_first_activity_on_fresh_profile(gamification_service):
    """First tracked expense: 10 base XP plus the 25 XP First Step reward"""
    unlocked = await gamification_service.record_activity()

    profile = await gamification_service.get_profile()
    assert _ids(unlocked) == ["first_expense"]
    assert profile.total_activities_tracked == 1
    assert profile.experience_points == 35
    assert profile.total_points == 35
    assert profile.level == 1
    assert profile.unlocked_achievements == ["first_expense"]
    assert profile.current_streak == 1
    assert profile.last_activity_date == date(2024, 1, 15)


@pytest.mark.asyncio
async def test_activity_is_persisted(gamification_service, memory_storage):
    await gamification_service.record_activity()

    document = json.loads(await memory_storage.get(PROFILE_STORAGE_KEY))
    assert document["totalExpensesTracked"] == 1
    assert document["totalPoints"] == 35
    assert document["lastActivityDate"] == "2024-01-15"
    assert document["unlockedAchievements"] == ["first_expense"]


@pytest.mark.asyncio
async def test_activity_levels_up_with_carry_over(memory_storage, clock):
    """Level 1 at 90 XP plus the 10 XP base award lands exactly on level 2"""
    stored = GamificationProfile(
        experience_points=90,
        total_points=90,
        total_activities_tracked=1,
        unlocked_achievements=["first_expense"],
    )
    await memory_storage.set(PROFILE_STORAGE_KEY, stored.to_storage_json())
    service = GamificationService(ProfileStore(memory_storage), clock=clock)

    await service.record_activity()

    profile = await service.get_profile()
    assert profile.level == 2
    assert profile.experience_points == 0
    assert profile.total_points == 100


@pytest.mark.asyncio
async def test_seven_consecutive_days(gamification_service, clock):
    """Week of tracking: one weekly bonus and Week Warrior on day 7"""
    unlocked_by_day = []
    for _ in range(7):
        unlocked_by_day.append(_ids(await gamification_service.record_activity()))
        clock.advance(days=1)

    profile = await gamification_service.get_profile()
    assert profile.current_streak == 7
    assert profile.longest_streak == 7
    assert profile.last_weekly_bonus_day == 7
    assert unlocked_by_day[0] == ["first_expense"]
    assert unlocked_by_day[1:6] == [[]] * 5
    assert "week_streak" in unlocked_by_day[6]
    # 7 x 10 base + 25 first step + 50 weekly bonus + 100 week warrior
    assert profile.total_points == 245
    assert profile.level == 2
    assert profile.experience_points == 145


@pytest.mark.asyncio
async def test_weekly_bonus_not_repeated_same_day(gamification_service, clock):
    start = clock.today()
    for offset in range(7):
        await gamification_service.record_activity(activity_date=start + timedelta(days=offset))

    await gamification_service.record_activity(activity_date=start + timedelta(days=6))

    profile = await gamification_service.get_profile()
    assert profile.current_streak == 7
    assert profile.total_points == 255


@pytest.mark.asyncio
async def test_same_day_activities_keep_streak(gamification_service):
    for _ in range(3):
        await gamification_service.record_activity()

    profile = await gamification_service.get_profile()
    assert profile.total_activities_tracked == 3
    assert profile.current_streak == 1


@pytest.mark.asyncio
async def test_gap_breaks_streak(gamification_service, clock):
    await gamification_service.record_activity()
    clock.advance(days=1)
    await gamification_service.record_activity()
    clock.advance(days=3)
    await gamification_service.record_activity()

    profile = await gamification_service.get_profile()
    assert profile.current_streak == 1
    assert profile.longest_streak == 2


@pytest.mark.asyncio
async def test_explicit_activity_date_overrides_clock(gamification_service):
    await gamification_service.record_activity(activity_date=date(2023, 6, 1))

    profile = await gamification_service.get_profile()
    assert profile.last_activity_date == date(2023, 6, 1)


@pytest.mark.asyncio
async def test_concurrent_activities_are_serialized(gamification_service):
    """No lost updates when many activities are recorded at once"""
    results = await asyncio.gather(*(gamification_service.record_activity() for _ in range(20)))

    profile = await gamification_service.get_profile()
    assert profile.total_activities_tracked == 20
    # 20 x 10 base + 25 first step + 50 novice
    assert profile.total_points == 275
    assert sorted(i for r in results for i in _ids(r)) == ["expense_novice", "first_expense"]


@pytest.mark.asyncio
async def test_today_uses_configured_timezone(profile_store, clock):
    clock.now = datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)

    tokyo = GamificationService(profile_store, timezone_name="Asia/Tokyo", clock=clock)
    utc = GamificationService(profile_store, clock=clock)

    assert tokyo.today() == date(2024, 1, 16)
    assert utc.today() == date(2024, 1, 15)


# ============================================================================
# Failure Handling
# ============================================================================

@pytest.mark.asyncio
async def test_save_failure_keeps_progress_in_memory(memory_storage, clock):
    service = GamificationService(ProfileStore(memory_storage), clock=clock)

    with patch.object(memory_storage, "set", AsyncMock(side_effect=OSError("disk full"))):
        unlocked = await service.record_activity()

    profile = await service.get_profile()
    assert _ids(unlocked) == ["first_expense"]
    assert profile.total_activities_tracked == 1
    assert PROFILE_STORAGE_KEY not in memory_storage


@pytest.mark.asyncio
async def test_timeout_applies_nothing(clock):
    service = GamificationService(ProfileStore(SlowSaveStore(delay=1.0)), clock=clock)

    with pytest.raises(StorageTimeoutError):
        await service.record_activity(timeout=0.01)

    profile = await service.get_profile()
    assert profile.total_activities_tracked == 0
    assert profile.total_points == 0
    assert service.get_recent_achievements() == []


@pytest.mark.asyncio
async def test_engine_error_is_logged_not_raised(gamification_service):
    with patch(
        "expense_gamification.services.gamification_service.check_achievements",
        side_effect=RuntimeError("boom"),
    ):
        unlocked = await gamification_service.record_activity()

    profile = await gamification_service.get_profile()
    assert unlocked == []
    assert profile.total_activities_tracked == 0


# ============================================================================
# Queries
# ============================================================================

@pytest.mark.asyncio
async def test_get_achievements_reports_unlock_time(gamification_service, clock):
    await gamification_service.record_activity()

    statuses = await gamification_service.get_achievements()

    assert len(statuses) == 12
    first = statuses[0]
    assert first.achievement.id == "first_expense"
    assert first.is_unlocked is True
    assert first.unlocked_at == clock()
    assert statuses[1].progress.description == "1/10"


@pytest.mark.asyncio
async def test_recent_achievements_newest_first(gamification_service, clock):
    await gamification_service.record_activity()
    clock.advance(days=1)
    for _ in range(9):
        await gamification_service.record_activity()

    recent = gamification_service.get_recent_achievements()

    assert _ids(recent) == ["expense_novice", "first_expense"]
    assert _ids(gamification_service.get_recent_achievements(limit=1)) == ["expense_novice"]
    assert gamification_service.get_recent_achievements(limit=0) == []


@pytest.mark.asyncio
async def test_get_level_progress(gamification_service):
    await gamification_service.record_activity()

    progress = await gamification_service.get_level_progress()

    assert progress["current_level"] == 1
    assert progress["xp_in_current_level"] == 35
    assert progress["xp_to_next_level"] == 65


@pytest.mark.asyncio
async def test_motivational_message_for_new_user(gamification_service):
    message = await gamification_service.get_motivational_message()

    assert message == "📈 Track expenses to build better habits!"


@pytest.mark.asyncio
async def test_motivational_message_mentions_streak(gamification_service):
    await gamification_service.record_activity()

    message = await gamification_service.get_motivational_message()

    assert message == "✅ 1 days of consistent tracking!"


def test_budget_status_delegate(gamification_service):
    status = gamification_service.calculate_budget_status(Decimal("1000"), Decimal("600"))

    assert status.tier == BudgetHealthTier.GOOD
    assert status.percentage_used == 60.0


def test_allocation_progress_delegate(gamification_service):
    progress = gamification_service.calculate_allocation_progress(1000, 700, 200, 100)

    assert progress.savings_progress == pytest.approx(100.0)
    assert "TREASURE CHEST SECURED" in progress.message


# ============================================================================
# Reset
# ============================================================================

@pytest.mark.asyncio
async def test_reset_profile(gamification_service, memory_storage):
    for _ in range(3):
        await gamification_service.record_activity()

    fresh = await gamification_service.reset_profile()

    assert fresh == GamificationProfile()
    assert await gamification_service.get_profile() is fresh
    assert gamification_service.get_recent_achievements() == []
    document = json.loads(await memory_storage.get(PROFILE_STORAGE_KEY))
    assert document["totalPoints"] == 0
    assert document["level"] == 1
    statuses = await gamification_service.get_achievements()
    assert not any(s.is_unlocked for s in statuses)


@pytest.mark.asyncio
async def test_activity_after_reset_starts_over(gamification_service):
    await gamification_service.record_activity()
    await gamification_service.reset_profile()

    unlocked = await gamification_service.record_activity()

    assert _ids(unlocked) == ["first_expense"]
    assert (await gamification_service.get_profile()).total_points == 35


@pytest.mark.asyncio
async def test_reset_and_activity_do_not_interleave(clock):
    """Reset racing two activities ends in a state some serial order produces"""
    storage = SlowSaveStore(delay=0.01)
    service = GamificationService(ProfileStore(storage), clock=clock)

    await asyncio.gather(
        service.record_activity(),
        service.reset_profile(),
        service.record_activity(),
    )

    profile = await service.get_profile()
    assert profile.total_activities_tracked in (0, 1)
    expected_points = {0: 0, 1: 35}[profile.total_activities_tracked]
    assert profile.total_points == expected_points
    assert profile.experience_points == expected_points
    assert await _stored_profile(storage) == profile


# ============================================================================
# Awarding Points
# ============================================================================

@pytest.mark.asyncio
async def test_award_points_is_persisted(gamification_service, memory_storage):
    result = await gamification_service.award_points(50)

    profile = await gamification_service.get_profile()
    assert result.leveled_up is False
    assert result.new_level == 1
    assert profile.experience_points == 50
    assert profile.total_points == 50
    assert profile.total_activities_tracked == 0
    assert await _stored_profile(memory_storage) == profile


@pytest.mark.asyncio
async def test_award_points_levels_up_with_carry_over(gamification_service):
    await gamification_service.award_points(90)

    leveled_up, new_level = await gamification_service.award_points(20)

    profile = await gamification_service.get_profile()
    assert leveled_up is True
    assert new_level == 2
    assert profile.level == 2
    assert profile.experience_points == 10


@pytest.mark.asyncio
async def test_award_points_does_not_mutate_shared_instance(gamification_service):
    before = await gamification_service.get_profile()

    await gamification_service.award_points(30)

    assert before.total_points == 0
    assert (await gamification_service.get_profile()).total_points == 30


@pytest.mark.asyncio
async def test_award_points_skips_achievement_pass(gamification_service):
    """Thresholds reached by an award unlock on the next recorded activity"""
    await gamification_service.award_points(1000)

    profile = await gamification_service.get_profile()
    assert profile.level == 5
    assert profile.unlocked_achievements == []

    unlocked = await gamification_service.record_activity()

    assert _ids(unlocked) == ["first_expense", "level_5", "point_collector"]


@pytest.mark.asyncio
async def test_award_points_serialized_with_activity(clock):
    storage = SlowSaveStore(delay=0.01)
    service = GamificationService(ProfileStore(storage), clock=clock)

    await asyncio.gather(
        service.record_activity(),
        service.award_points(100, source="promotion"),
        service.record_activity(),
    )

    profile = await service.get_profile()
    assert profile.total_activities_tracked == 2
    # 2 x 10 base + 25 first step + 100 awarded
    assert profile.total_points == 145
    assert await _stored_profile(storage) == profile


@pytest.mark.asyncio
async def test_award_points_timeout_applies_nothing(clock):
    service = GamificationService(ProfileStore(SlowSaveStore(delay=1.0)), clock=clock)

    with pytest.raises(StorageTimeoutError):
        await service.award_points(500, timeout=0.01)

    profile = await service.get_profile()
    assert profile.total_points == 0
    assert profile.level == 1
