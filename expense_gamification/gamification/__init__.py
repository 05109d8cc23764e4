"""
Gamification engine for expense tracking

Turns recorded activity into:
- XP and levels
- Consecutive-day streaks with milestone bonuses
- Achievements
- Budget health classification
"""

from expense_gamification.gamification.xp_system import apply_points, normalize_level, calculate_level_progress
from expense_gamification.gamification.streak_system import update_streak
from expense_gamification.gamification.achievement_system import (
    ACHIEVEMENT_CATALOG,
    check_achievements,
    get_achievements_with_status,
)
from expense_gamification.gamification.budget_system import classify_budget, calculate_allocation_progress
from expense_gamification.gamification.profile_store import ProfileStore

__all__ = [
    "apply_points",
    "normalize_level",
    "calculate_level_progress",
    "update_streak",
    "ACHIEVEMENT_CATALOG",
    "check_achievements",
    "get_achievements_with_status",
    "classify_budget",
    "calculate_allocation_progress",
    "ProfileStore",
]
