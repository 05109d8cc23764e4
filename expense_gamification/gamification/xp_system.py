"""
XP and Leveling System

Applies points to a profile and normalizes excess experience into levels.
This is the only place leveling happens; streak bonuses and achievement
rewards call apply_points / normalize_level directly.

Leveling Curve:
- Threshold for the next level is level * 100 XP
- Experience carries over: on level up the threshold is subtracted

XP Award Rules:
- Expense tracked: 10 XP
- Weekly streak milestone (every 7 days): 50 XP
- Monthly streak milestone (every 30 days): 200 XP
- Achievement unlocks: 25-1000 XP
"""

from typing import Any, Dict
import logging

from expense_gamification.constants import XP_PER_LEVEL
from expense_gamification.models.gamification import GamificationProfile, LevelUpResult
from expense_gamification.observability.metrics import record_points

logger = logging.getLogger(__name__)


def experience_to_next_level(level: int) -> int:
    """XP needed to leave the given level"""
    return level * XP_PER_LEVEL


def normalize_level(profile: GamificationProfile) -> int:
    """
    Convert excess experience into level increments

    Afterwards 0 <= experience_points < experience_to_next_level(level).

    Returns:
        Number of levels gained
    """
    gained = 0
    threshold = experience_to_next_level(profile.level)
    while threshold > 0 and profile.experience_points >= threshold:
        profile.experience_points -= threshold
        profile.level += 1
        gained += 1
        threshold = experience_to_next_level(profile.level)
    return gained


def apply_points(
    profile: GamificationProfile,
    points: int,
    source: str = "activity"
) -> LevelUpResult:
    """
    Add points to the profile and level up as needed

    Args:
        profile: Profile to mutate
        points: Points to add. Negative values are corrective adjustments:
            they are applied but experience and lifetime points never drop
            below zero, and the level never decreases.
        source: Label for metrics (activity, streak_bonus, achievement)

    Returns:
        LevelUpResult(leveled_up, new_level)
    """
    old_level = profile.level

    if points < 0:
        logger.warning(f"Applying negative point adjustment of {points} to user {profile.user_id}")

    profile.experience_points = max(0, profile.experience_points + points)
    profile.total_points = max(0, profile.total_points + points)
    normalize_level(profile)
    record_points(source, points)

    leveled_up = profile.level > old_level

    logger.debug(
        f"Applied {points} XP ({source}) to user {profile.user_id}. "
        f"Total: {profile.total_points}, Level: {profile.level}"
    )
    if leveled_up:
        logger.info(f"User {profile.user_id} leveled up from {old_level} to {profile.level}!")

    return LevelUpResult(leveled_up=leveled_up, new_level=profile.level)


def calculate_level_progress(profile: GamificationProfile) -> Dict[str, Any]:
    """
    Progress through the current level

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int,  # XP still missing
            'total_xp_for_next_level': int,  # threshold of current level
            'progress': float  # 0.0 - 1.0, for progress bars
        }
    """
    threshold = experience_to_next_level(profile.level)
    return {
        "current_level": profile.level,
        "xp_in_current_level": profile.experience_points,
        "xp_to_next_level": max(0, threshold - profile.experience_points),
        "total_xp_for_next_level": threshold,
        "progress": profile.level_progress,
    }
