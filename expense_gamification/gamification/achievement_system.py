"""
Achievement System

Evaluates a fixed catalog of achievements against profile counters:
- Tracking (number of expenses tracked)
- Streak (current and longest streaks)
- General (levels, lifetime points)

Features:
- Progress tracking for locked achievements
- Single evaluation pass per recorded activity
- XP rewards for unlocking achievements
"""

from typing import Dict, List, Optional
from datetime import datetime, timezone
import logging

from expense_gamification import constants as c
from expense_gamification.gamification.xp_system import apply_points
from expense_gamification.models.gamification import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    AchievementStatus,
    GamificationProfile,
    UnlockedAchievement,
)
from expense_gamification.observability.metrics import gamification_achievements_unlocked_total

logger = logging.getLogger(__name__)


# ============================================
# Metrics the catalog keys off
# ============================================

def _activities(profile: GamificationProfile) -> int:
    return profile.total_activities_tracked


def _current_streak(profile: GamificationProfile) -> int:
    return profile.current_streak


def _longest_streak(profile: GamificationProfile) -> int:
    return profile.longest_streak


def _level(profile: GamificationProfile) -> int:
    return profile.level


def _total_points(profile: GamificationProfile) -> int:
    return profile.total_points


# Evaluation order matters: rewards applied by earlier entries are visible
# to later entries within the same pass.
ACHIEVEMENT_CATALOG: tuple[Achievement, ...] = (
    # Tracking
    Achievement(
        id=c.FIRST_EXPENSE, name="First Step", description="Track your first expense",
        icon="🎯", points_reward=25, category=AchievementCategory.TRACKING,
        threshold=c.EXPENSES_FIRST, metric=_activities,
    ),
    Achievement(
        id=c.EXPENSE_NOVICE, name="Expense Novice", description="Track 10 expenses",
        icon="📝", points_reward=50, category=AchievementCategory.TRACKING,
        threshold=c.EXPENSES_NOVICE, metric=_activities,
    ),
    Achievement(
        id=c.EXPENSE_TRACKER, name="Expense Tracker", description="Track 50 expenses",
        icon="📊", points_reward=100, category=AchievementCategory.TRACKING,
        threshold=c.EXPENSES_TRACKER, metric=_activities,
    ),
    Achievement(
        id=c.EXPENSE_MASTER, name="Expense Master", description="Track 100 expenses",
        icon="👑", points_reward=250, category=AchievementCategory.TRACKING,
        threshold=c.EXPENSES_MASTER, metric=_activities,
    ),
    # Streaks
    Achievement(
        id=c.WEEK_STREAK, name="Week Warrior", description="Track expenses for 7 days in a row",
        icon="🔥", points_reward=100, category=AchievementCategory.STREAK,
        threshold=c.WEEKLY_STREAK_DAYS, metric=_current_streak,
    ),
    Achievement(
        id=c.MONTH_STREAK, name="Monthly Master", description="Track expenses for 30 days in a row",
        icon="⭐", points_reward=300, category=AchievementCategory.STREAK,
        threshold=c.MONTHLY_STREAK_DAYS, metric=_current_streak,
    ),
    Achievement(
        id=c.STREAK_LEGEND, name="Streak Legend", description="Achieve a 100-day streak",
        icon="🏆", points_reward=1000, category=AchievementCategory.STREAK,
        threshold=c.LEGENDARY_STREAK_DAYS, metric=_longest_streak,
    ),
    # Levels
    Achievement(
        id=c.LEVEL_5, name="Rising Star", description="Reach level 5",
        icon="⭐", points_reward=50, category=AchievementCategory.GENERAL,
        threshold=c.LEVEL_RISING_STAR, metric=_level,
    ),
    Achievement(
        id=c.LEVEL_10, name="Skilled Tracker", description="Reach level 10",
        icon="🌟", points_reward=100, category=AchievementCategory.GENERAL,
        threshold=c.LEVEL_SKILLED_TRACKER, metric=_level,
    ),
    Achievement(
        id=c.LEVEL_25, name="Finance Guru", description="Reach level 25",
        icon="💎", points_reward=500, category=AchievementCategory.GENERAL,
        threshold=c.LEVEL_FINANCE_GURU, metric=_level,
    ),
    # Points
    Achievement(
        id=c.POINT_COLLECTOR, name="Point Collector", description="Earn 1000 total points",
        icon="💰", points_reward=100, category=AchievementCategory.GENERAL,
        threshold=c.POINTS_COLLECTOR, metric=_total_points,
    ),
    Achievement(
        id=c.POINT_HOARDER, name="Point Hoarder", description="Earn 5000 total points",
        icon="💎", points_reward=500, category=AchievementCategory.GENERAL,
        threshold=c.POINTS_HOARDER, metric=_total_points,
    ),
)

ACHIEVEMENTS_BY_ID: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENT_CATALOG}


def check_achievements(
    profile: GamificationProfile,
    unlocked_at: Optional[datetime] = None
) -> List[UnlockedAchievement]:
    """
    Unlock every locked achievement whose criteria the profile now meets

    Runs exactly one pass over the catalog. Rewards are applied through
    apply_points, which only levels up; it never triggers another pass, so
    an achievement made reachable by a reward in this pass unlocks on the
    next recorded activity.

    Args:
        profile: Profile to mutate
        unlocked_at: Timestamp to stamp on unlocks (defaults to now, UTC)

    Returns:
        Newly unlocked achievements in catalog order
    """
    if unlocked_at is None:
        unlocked_at = datetime.now(timezone.utc)

    newly_unlocked = []

    for achievement in ACHIEVEMENT_CATALOG:
        if achievement.id in profile.unlocked_achievements:
            continue
        if not achievement.is_unlocked_by(profile):
            continue

        profile.unlocked_achievements.append(achievement.id)
        newly_unlocked.append(UnlockedAchievement(achievement=achievement, unlocked_at=unlocked_at))
        apply_points(profile, achievement.points_reward, source="achievement")
        gamification_achievements_unlocked_total.labels(category=achievement.category.value).inc()

        logger.info(
            f"User {profile.user_id} unlocked achievement: {achievement.id} "
            f"({achievement.name}) +{achievement.points_reward} XP"
        )

    return newly_unlocked


def calculate_achievement_progress(
    profile: GamificationProfile,
    achievement: Achievement
) -> AchievementProgress:
    """Progress toward an achievement; percentage is clamped to 0-100"""
    current = achievement.metric(profile)
    required = achievement.threshold
    percentage = min(100, int(current / required * 100)) if required > 0 else 0
    return AchievementProgress(current=current, required=required, percentage=max(0, percentage))


def get_achievements_with_status(
    profile: GamificationProfile,
    unlock_times: Optional[Dict[str, datetime]] = None
) -> List[AchievementStatus]:
    """
    Full catalog annotated with unlock state and progress, in catalog order

    Args:
        profile: Profile to read
        unlock_times: Known unlock timestamps by achievement id
    """
    unlock_times = unlock_times or {}
    unlocked = set(profile.unlocked_achievements)

    return [
        AchievementStatus(
            achievement=achievement,
            is_unlocked=achievement.id in unlocked,
            progress=calculate_achievement_progress(profile, achievement),
            unlocked_at=unlock_times.get(achievement.id) if achievement.id in unlocked else None,
        )
        for achievement in ACHIEVEMENT_CATALOG
    ]


def get_achievement_recommendations(profile: GamificationProfile, limit: int = 3) -> List[AchievementStatus]:
    """Locked achievements at least half-way done, closest to completion first"""
    locked = [
        status for status in get_achievements_with_status(profile)
        if not status.is_unlocked and status.progress.percentage >= 50
    ]
    locked.sort(key=lambda s: s.progress.percentage, reverse=True)
    return locked[:limit]


def format_achievement_unlock_message(unlocked: UnlockedAchievement) -> str:
    """
    Format achievement unlock message for celebration

    Args:
        unlocked: Entry returned by check_achievements()

    Returns:
        Formatted celebration message
    """
    achievement = unlocked.achievement
    return f"""🎉 ACHIEVEMENT UNLOCKED! 🎉

{achievement.icon} {achievement.name}

{achievement.description}

⭐ +{achievement.points_reward} XP Bonus!"""
