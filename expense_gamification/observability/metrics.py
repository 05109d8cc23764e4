"""
Prometheus metrics for the gamification engine.

Metrics are registered on the default prometheus_client registry so a host
application can expose them alongside its own.
"""

import logging
from prometheus_client import Counter, Gauge

logger = logging.getLogger(__name__)

# =============================================================================
# Gamification Metrics
# =============================================================================

gamification_points_awarded_total = Counter(
    "gamification_points_awarded_total",
    "Total points awarded",
    ["source"],  # source: activity/streak_bonus/achievement
)

gamification_achievements_unlocked_total = Counter(
    "gamification_achievements_unlocked_total",
    "Total achievements unlocked",
    ["category"],
)

gamification_activities_recorded_total = Counter(
    "gamification_activities_recorded_total",
    "Total tracked activities recorded",
)

gamification_current_streak = Gauge(
    "gamification_current_streak",
    "Current consecutive-day streak",
)

gamification_level = Gauge(
    "gamification_level",
    "Current profile level",
)

# =============================================================================
# Storage Metrics
# =============================================================================

gamification_storage_errors_total = Counter(
    "gamification_storage_errors_total",
    "Profile storage failures by operation",
    ["operation"],  # operation: load/save
)


def record_points(source: str, points: int) -> None:
    """Count awarded points; negative adjustments are not counted"""
    if points > 0:
        gamification_points_awarded_total.labels(source=source).inc(points)
