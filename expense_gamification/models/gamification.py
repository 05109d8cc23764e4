"""Gamification models"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expense_gamification.constants import DEFAULT_USER_ID


class AchievementCategory(str, Enum):
    """Achievement categories"""
    GENERAL = "General"
    TRACKING = "Tracking"
    STREAK = "Streak"
    BUDGET = "Budget"
    SAVINGS = "Savings"


class BudgetHealthTier(str, Enum):
    """Spend-vs-budget classification"""
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    OVER_BUDGET = "over_budget"
    UNSET = "unset"  # no budget limit configured


class GamificationProfile(BaseModel):
    """
    Persisted gamification state for the single user.

    Attributes are snake_case; the JSON document uses the camelCase aliases
    (see to_storage_json / from_storage_json).
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(default=DEFAULT_USER_ID, alias="userId")
    level: int = Field(default=1, ge=1)
    experience_points: int = Field(default=0, ge=0, alias="experiencePoints")
    total_activities_tracked: int = Field(default=0, ge=0, alias="totalExpensesTracked")
    current_streak: int = Field(default=0, ge=0, alias="currentStreak")
    longest_streak: int = Field(default=0, ge=0, alias="longestStreak")
    last_activity_date: Optional[date] = Field(default=None, alias="lastActivityDate")
    last_weekly_bonus_day: int = Field(default=0, ge=0, alias="lastWeeklyBonusDay")
    last_monthly_bonus_day: int = Field(default=0, ge=0, alias="lastMonthlyBonusDay")
    unlocked_achievements: list[str] = Field(default_factory=list, alias="unlockedAchievements")
    total_points: int = Field(default=0, ge=0, alias="totalPoints")

    @field_validator("last_activity_date", mode="before")
    @classmethod
    def truncate_to_date(cls, v):
        """Accept full ISO-8601 datetimes and keep only the date part"""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return date.fromisoformat(v.split("T", 1)[0])
        return v

    @field_validator("unlocked_achievements")
    @classmethod
    def dedupe_achievements(cls, v: list[str]) -> list[str]:
        """Unlocked ids form a set; keep first-seen order for display"""
        return list(dict.fromkeys(v))

    @property
    def experience_to_next_level(self) -> int:
        from expense_gamification.gamification.xp_system import experience_to_next_level
        return experience_to_next_level(self.level)

    @property
    def level_progress(self) -> float:
        """Progress through the current level, 0.0 to 1.0"""
        threshold = self.experience_to_next_level
        if threshold <= 0:
            return 0.0
        return min(1.0, max(0.0, self.experience_points / threshold))

    @property
    def level_progress_percentage(self) -> float:
        return self.level_progress * 100

    def to_storage_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_storage_json(cls, raw: str) -> "GamificationProfile":
        return cls.model_validate_json(raw)


class LevelUpResult(NamedTuple):
    """Outcome of applying points"""
    leveled_up: bool
    new_level: int


@dataclass(frozen=True)
class Achievement:
    """
    Catalog entry. Unlocks once metric(profile) >= threshold.

    The metric is a pure function of the profile so entries can be
    evaluated in isolation.
    """
    id: str
    name: str
    description: str
    icon: str
    points_reward: int
    category: AchievementCategory
    threshold: int
    metric: Callable[[GamificationProfile], int] = field(repr=False, compare=False)

    def is_unlocked_by(self, profile: GamificationProfile) -> bool:
        return self.metric(profile) >= self.threshold


@dataclass(frozen=True)
class UnlockedAchievement:
    """An achievement together with the moment it was unlocked"""
    achievement: Achievement
    unlocked_at: datetime


@dataclass(frozen=True)
class AchievementProgress:
    current: int
    required: int
    percentage: int

    @property
    def description(self) -> str:
        return f"{self.current}/{self.required}"


@dataclass(frozen=True)
class AchievementStatus:
    """Catalog entry annotated with the profile's unlock state"""
    achievement: Achievement
    is_unlocked: bool
    progress: AchievementProgress
    unlocked_at: Optional[datetime] = None


class BudgetStatus(BaseModel):
    """Derived spend-vs-budget classification (not persisted)"""
    budget_limit: Decimal
    current_spending: Decimal
    percentage_used: float
    tier: BudgetHealthTier
    color: str
    message: str

    @property
    def remaining_budget(self) -> Decimal:
        return self.budget_limit - self.current_spending


class AllocationProgress(BaseModel):
    """Income allocation against the 70-20-10 rule (not persisted)"""
    total_income: Decimal
    essentials_spent: Decimal
    savings_invested: Decimal
    discretionary_spent: Decimal

    essentials_target: Decimal
    savings_target: Decimal
    discretionary_target: Decimal

    # Raw percentages of target, unclamped (for messaging)
    essentials_progress: float
    savings_progress: float
    discretionary_progress: float

    # Ratios clamped to [0, 1] (for progress bars)
    essentials_progress_bar: float
    savings_progress_bar: float
    discretionary_progress_bar: float

    message: str
