"""
Daily Streak Tracking System

Tracks consecutive calendar days with at least one recorded activity.

Features:
- Best (longest) streak tracking
- Weekly (every 7 days) and monthly (every 30 days) milestone bonuses,
  each granted at most once per streak value
- Milestone guards scoped to the current unbroken run
"""

from typing import Any, Dict, Optional
from datetime import date
import logging

from expense_gamification.constants import (
    MONTHLY_STREAK_DAYS,
    MONTHLY_STREAK_POINTS,
    WEEKLY_STREAK_DAYS,
    WEEKLY_STREAK_POINTS,
)
from expense_gamification.gamification.xp_system import apply_points
from expense_gamification.models.gamification import GamificationProfile

logger = logging.getLogger(__name__)


def update_streak(
    profile: GamificationProfile,
    activity_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Update the streak for an activity on activity_date

    Logic:
    - No previous activity: streak starts at 1
    - Same day: no change
    - Next day: increment, update longest, check milestones
    - Gap of 2+ days: streak resets to 1 and milestone guards reset

    Milestone bonuses go straight to apply_points; this never re-enters
    activity recording or achievement checks.

    Args:
        profile: Profile to mutate
        activity_date: Date of activity (defaults to today)

    Returns:
        {
            'current_streak': int,
            'longest_streak': int,
            'old_streak': int,
            'streak_broken': bool,
            'weekly_bonus_awarded': bool,
            'monthly_bonus_awarded': bool,
            'bonus_points': int,
            'message': str
        }
    """
    if activity_date is None:
        activity_date = date.today()

    old_current = profile.current_streak
    last_date = profile.last_activity_date

    streak_broken = False
    weekly_bonus = False
    monthly_bonus = False
    message = ""

    if last_date is None:
        profile.current_streak = 1
        message = "Streak started! Day 1 🎉"

    else:
        gap_days = (activity_date - last_date).days

        # Same day, or an activity dated before the last one
        if gap_days <= 0:
            message = f"Streak continues! Day {profile.current_streak} 🔥"

        # Next day (continuing streak)
        elif gap_days == 1:
            profile.current_streak += 1
            message = f"Streak continues! Day {profile.current_streak} 🔥"
            weekly_bonus, monthly_bonus = _award_milestone_bonuses(profile)

        else:
            streak_broken = True
            profile.current_streak = 1
            profile.last_weekly_bonus_day = 0
            profile.last_monthly_bonus_day = 0
            message = f"Streak reset. Previous: {old_current} days. Starting fresh! Day 1 💪"
            logger.info(
                f"User {profile.user_id} streak broken. "
                f"Was {old_current}, gap was {gap_days} days"
            )

    if profile.current_streak > profile.longest_streak:
        profile.longest_streak = profile.current_streak

    # Deliberately not "always": a backdated activity must not rewind the
    # date the next gap is measured from
    if last_date is None or activity_date > last_date:
        profile.last_activity_date = activity_date

    bonus_points = 0
    if weekly_bonus:
        bonus_points += WEEKLY_STREAK_POINTS
        message += f"\n🏆 {profile.current_streak}-day streak! +{WEEKLY_STREAK_POINTS} XP"
    if monthly_bonus:
        bonus_points += MONTHLY_STREAK_POINTS
        message += f"\n🏆 {profile.current_streak}-day streak! +{MONTHLY_STREAK_POINTS} XP"

    if profile.current_streak != old_current:
        logger.info(
            f"Updated streak for user {profile.user_id}: "
            f"{old_current} → {profile.current_streak} days"
        )

    return {
        "current_streak": profile.current_streak,
        "longest_streak": profile.longest_streak,
        "old_streak": old_current,
        "streak_broken": streak_broken,
        "weekly_bonus_awarded": weekly_bonus,
        "monthly_bonus_awarded": monthly_bonus,
        "bonus_points": bonus_points,
        "message": message,
    }


def _award_milestone_bonuses(profile: GamificationProfile) -> tuple[bool, bool]:
    """Grant weekly/monthly bonuses once per streak value"""
    current = profile.current_streak
    weekly = False
    monthly = False

    if current % WEEKLY_STREAK_DAYS == 0 and profile.last_weekly_bonus_day != current:
        apply_points(profile, WEEKLY_STREAK_POINTS, source="streak_bonus")
        profile.last_weekly_bonus_day = current
        weekly = True
        logger.info(f"User {profile.user_id} reached weekly milestone at {current} days")

    if current % MONTHLY_STREAK_DAYS == 0 and profile.last_monthly_bonus_day != current:
        apply_points(profile, MONTHLY_STREAK_POINTS, source="streak_bonus")
        profile.last_monthly_bonus_day = current
        monthly = True
        logger.info(f"User {profile.user_id} reached monthly milestone at {current} days")

    return weekly, monthly


def format_streak_display(profile: GamificationProfile) -> str:
    """
    Format the streak for display

    Returns:
        Formatted string for display
    """
    if profile.current_streak == 0:
        return "No active streak yet. Track an expense to start one! 💪"

    line = f"🔥 Streak: {profile.current_streak} days"
    if profile.longest_streak > profile.current_streak:
        line += f" (best: {profile.longest_streak})"

    days_to_week = WEEKLY_STREAK_DAYS - profile.current_streak % WEEKLY_STREAK_DAYS
    return f"{line}\n⏳ {days_to_week} days to the next weekly bonus"
