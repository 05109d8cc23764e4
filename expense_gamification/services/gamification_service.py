"""
GamificationService - Gamification orchestration

Composes the profile store and the level, streak, achievement and budget
engines into the operations the rest of the application calls.
"""

import logging
import random
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytz

from expense_gamification.constants import ADD_EXPENSE_POINTS, EXPENSES_TRACKER, LEVEL_SKILLED_TRACKER
from expense_gamification.exceptions import StorageTimeoutError
from expense_gamification.gamification.achievement_system import (
    check_achievements,
    get_achievements_with_status,
)
from expense_gamification.gamification.budget_system import (
    calculate_allocation_progress,
    classify_budget,
)
from expense_gamification.gamification.profile_store import ProfileStore
from expense_gamification.gamification.streak_system import update_streak
from expense_gamification.gamification.xp_system import apply_points, calculate_level_progress
from expense_gamification.models.gamification import (
    AchievementStatus,
    AllocationProgress,
    BudgetStatus,
    GamificationProfile,
    LevelUpResult,
    UnlockedAchievement,
)
from expense_gamification.observability.metrics import (
    gamification_activities_recorded_total,
    gamification_current_streak,
    gamification_level,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Recording tracked activity (streak, points, achievements) atomically
    - Read-only profile and achievement queries
    - Budget health and income allocation classification
    - Profile reset
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        timezone_name: str = "UTC",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize GamificationService.

        Args:
            profile_store: Store owning the profile instance
            timezone_name: IANA zone whose calendar days count for streaks
            clock: Returns the current timezone-aware datetime (defaults to UTC now)
        """
        self.profile_store = profile_store
        self.tz = pytz.timezone(timezone_name)
        self._clock = clock or _utc_now
        self._unlock_times: Dict[str, datetime] = {}
        self._recent_unlocks: List[UnlockedAchievement] = []
        logger.debug("GamificationService initialized")

    def today(self) -> date:
        """Current calendar date in the configured timezone"""
        return self._clock().astimezone(self.tz).date()

    async def record_activity(
        self,
        activity_date: Optional[date] = None,
        timeout: Optional[float] = None,
    ) -> List[UnlockedAchievement]:
        """
        Record one tracked expense.

        Order: count activity → update streak (may grant milestone bonus)
        → base points → single achievement pass → save. The whole sequence
        runs under the store's write lock on a copy of the profile; the copy
        becomes the live profile only once the save attempt completes.

        Args:
            activity_date: Date of the activity (defaults to today)
            timeout: Seconds allowed per storage call

        Returns:
            Newly unlocked achievements in catalog order

        Raises:
            StorageTimeoutError: a storage call timed out; nothing was applied
        """
        try:
            async with self.profile_store.write_lock:
                current = await self.profile_store.get_profile(timeout=timeout)
                profile = current.model_copy(deep=True)

                profile.total_activities_tracked += 1
                streak_result = update_streak(profile, activity_date or self.today())
                level_result = apply_points(profile, ADD_EXPENSE_POINTS, source="activity")
                newly_unlocked = check_achievements(profile, unlocked_at=self._clock())

                await self.profile_store.save_profile(profile, timeout=timeout)

        except StorageTimeoutError:
            raise
        except Exception as e:
            logger.error(f"Error recording gamification activity: {e}", exc_info=True)
            return []

        for unlocked in newly_unlocked:
            self._unlock_times[unlocked.achievement.id] = unlocked.unlocked_at
            self._recent_unlocks.append(unlocked)

        gamification_activities_recorded_total.inc()
        gamification_current_streak.set(profile.current_streak)
        gamification_level.set(profile.level)

        logger.info(
            f"Gamification processed for tracked expense: user={profile.user_id}, "
            f"level={profile.level}{' (level up)' if level_result.leveled_up else ''}, "
            f"streak={streak_result['current_streak']}, "
            f"achievements={len(newly_unlocked)}"
        )

        return newly_unlocked

    async def award_points(
        self,
        points: int,
        source: str = "manual",
        timeout: Optional[float] = None,
    ) -> LevelUpResult:
        """
        Grant points outside of activity recording (corrections, promotions).

        Runs under the write lock on a copy of the profile, like
        record_activity, but does not evaluate achievements; thresholds
        reached here unlock on the next recorded activity.

        Args:
            points: Points to grant (negative values are corrective adjustments)
            source: Label for metrics
            timeout: Seconds allowed per storage call

        Raises:
            StorageTimeoutError: a storage call timed out; nothing was applied
        """
        async with self.profile_store.write_lock:
            current = await self.profile_store.get_profile(timeout=timeout)
            profile = current.model_copy(deep=True)
            result = apply_points(profile, points, source=source)
            await self.profile_store.save_profile(profile, timeout=timeout)

        gamification_level.set(profile.level)
        logger.info(f"Awarded {points} points ({source}) to user {profile.user_id}, level {result.new_level}")
        return result

    async def get_profile(self, timeout: Optional[float] = None) -> GamificationProfile:
        """Current profile (shared instance; treat as read-only)"""
        return await self.profile_store.get_profile(timeout=timeout)

    async def reset_profile(self, timeout: Optional[float] = None) -> GamificationProfile:
        """
        Replace the profile with defaults and persist immediately.

        Raises:
            StorageTimeoutError: the save timed out; the old profile is kept
        """
        async with self.profile_store.write_lock:
            fresh = GamificationProfile()
            await self.profile_store.save_profile(fresh, timeout=timeout)

        self._unlock_times.clear()
        self._recent_unlocks.clear()
        gamification_current_streak.set(0)
        gamification_level.set(fresh.level)

        logger.info("Gamification profile reset")
        return fresh

    async def get_achievements(self) -> List[AchievementStatus]:
        """All achievements in catalog order with unlock state and progress"""
        profile = await self.profile_store.get_profile()
        return get_achievements_with_status(profile, self._unlock_times)

    def get_recent_achievements(self, limit: int = 3) -> List[UnlockedAchievement]:
        """Achievements unlocked by this process, newest first"""
        if limit <= 0:
            return []
        return list(reversed(self._recent_unlocks))[:limit]

    async def get_level_progress(self) -> Dict[str, Any]:
        profile = await self.profile_store.get_profile()
        return calculate_level_progress(profile)

    async def get_motivational_message(self) -> str:
        """
        Pick a motivational message based on the user's progress

        Returns:
            One message from those applicable to the current profile
        """
        profile = await self.profile_store.get_profile()

        messages = []

        if profile.current_streak > 0:
            messages.append(f"✅ {profile.current_streak} days of consistent tracking!")

        if profile.level >= LEVEL_SKILLED_TRACKER:
            messages.append("📊 Building great financial awareness!")

        if profile.total_activities_tracked > EXPENSES_TRACKER:
            messages.append(f"💰 {profile.total_activities_tracked} expenses tracked - excellent progress!")

        if not messages:
            messages.append("📈 Track expenses to build better habits!")

        return random.choice(messages)

    def calculate_budget_status(self, monthly_budget: Any, current_spending: Any) -> BudgetStatus:
        """Classify spending against the monthly budget"""
        return classify_budget(monthly_budget, current_spending)

    def calculate_allocation_progress(
        self,
        income: Any,
        essentials: Any,
        savings: Any,
        discretionary: Any
    ) -> AllocationProgress:
        """Income allocation progress using the 70-20-10 rule"""
        return calculate_allocation_progress(income, essentials, savings, discretionary)
