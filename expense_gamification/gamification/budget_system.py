"""
Budget Health System

Stateless classification of spending against a budget limit, and income
allocation progress against the 70-20-10 rule (70% essentials, 20%
savings, 10% discretionary).

Health tiers (first match wins):
- <= 50% used: excellent
- <= 75% used: good
- <= 90% used: warning
- <= 100% used: critical
- above 100%: over budget
- no limit set (limit <= 0): unset

Bad numeric input is clamped rather than rejected.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Tuple
import logging

from expense_gamification.constants import (
    DISCRETIONARY_SHARE,
    ESSENTIALS_SHARE,
    SAVINGS_SHARE,
)
from expense_gamification.models.gamification import (
    AllocationProgress,
    BudgetHealthTier,
    BudgetStatus,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Upper bound (inclusive, percent used) for each tier, in evaluation order
_TIER_BOUNDS: Tuple[Tuple[Decimal, BudgetHealthTier], ...] = (
    (Decimal("50"), BudgetHealthTier.EXCELLENT),
    (Decimal("75"), BudgetHealthTier.GOOD),
    (Decimal("90"), BudgetHealthTier.WARNING),
    (Decimal("100"), BudgetHealthTier.CRITICAL),
)

_TIER_DISPLAY = {
    BudgetHealthTier.EXCELLENT: ("#4CAF50", "🛡️ PERFECT DEFENSE! BUDGET UNTOUCHED!"),
    BudgetHealthTier.GOOD: ("#8BC34A", "⚔️ HOLDING THE LINE! KEEP IT UP!"),
    BudgetHealthTier.WARNING: ("#FFC107", "⚠️ SHIELDS FAILING! WATCH YOUR SPENDING!"),
    BudgetHealthTier.CRITICAL: ("#FF9800", "🚨 CRITICAL HIT! BUDGET NEARLY DEPLETED!"),
    BudgetHealthTier.OVER_BUDGET: ("#F44336", "💀 GAME OVER... FOR THIS BUDGET! RETRY NEXT MONTH!"),
    BudgetHealthTier.UNSET: ("#9E9E9E", "⚔️ START YOUR QUEST: SET A BUDGET!"),
}


def _to_amount(value: Any, name: str) -> Decimal:
    """Coerce to a finite, non-negative Decimal"""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning(f"Invalid {name} {value!r}, using 0")
        return ZERO

    if not amount.is_finite():
        logger.warning(f"Non-finite {name} {value!r}, using 0")
        return ZERO
    if amount < 0:
        logger.warning(f"Negative {name} {value!r}, clamping to 0")
        return ZERO
    return amount


def tier_for_percentage(percentage_used: Decimal) -> BudgetHealthTier:
    """Map percent of budget used to a health tier"""
    for upper_bound, tier in _TIER_BOUNDS:
        if percentage_used <= upper_bound:
            return tier
    return BudgetHealthTier.OVER_BUDGET


def classify_budget(limit: Any, spending: Any) -> BudgetStatus:
    """
    Classify current spending against a budget limit

    Args:
        limit: Budget limit (<= 0 means no budget set)
        spending: Amount spent so far

    Returns:
        BudgetStatus with percentage_used = spending / limit * 100
        (0 when no budget is set)
    """
    budget_limit = _to_amount(limit, "budget limit")
    current_spending = _to_amount(spending, "spending")

    if budget_limit <= 0:
        tier = BudgetHealthTier.UNSET
        percentage = ZERO
    else:
        percentage = current_spending / budget_limit * HUNDRED
        tier = tier_for_percentage(percentage)

    color, message = _TIER_DISPLAY[tier]
    return BudgetStatus(
        budget_limit=budget_limit,
        current_spending=current_spending,
        percentage_used=float(percentage),
        tier=tier,
        color=color,
        message=message,
    )


def _progress(spent: Decimal, target: Decimal) -> Tuple[float, float]:
    """(raw percentage, bar ratio clamped to [0, 1])"""
    if target <= 0:
        return 0.0, 0.0
    ratio = spent / target
    return float(ratio * HUNDRED), float(min(Decimal("1"), ratio))


def _allocation_message(income: Decimal, essentials: float, savings: float, discretionary: float) -> str:
    if income <= 0:
        return "Set your income to track budget goals"

    messages = []

    if savings >= 100:
        messages.append("💰 TREASURE CHEST SECURED! SAVINGS GOAL MET!")
    elif savings >= 75:
        messages.append(f"💎 SO CLOSE TO THE LOOT! {savings:.0f}% SAVED!")
    elif savings >= 50:
        messages.append(f"⚔️ HALFWAY TO GLORY! {savings:.0f}% SAVED!")
    else:
        messages.append(f"🛡️ BUILD YOUR DEFENSES! {savings:.0f}% SAVED")

    if essentials > 100:
        messages.append("⚠️ MANA LOW! ESSENTIALS OVERLOAD!")
    elif essentials > 90:
        messages.append("👹 BOSS FIGHT IMMINENT! ESSENTIALS LIMIT NEAR!")

    if discretionary > 100:
        messages.append("💣 DAMAGE TAKEN! DISCRETIONARY OVERLOAD!")

    return " • ".join(messages)


def calculate_allocation_progress(
    income: Any,
    essentials: Any,
    savings: Any,
    discretionary: Any
) -> AllocationProgress:
    """
    Progress of each spending bucket against its 70-20-10 target

    Args:
        income: Total income for the period
        essentials: Spent on essentials
        savings: Saved or invested
        discretionary: Spent on discretionary items

    Returns:
        AllocationProgress with raw percentages (unclamped) and progress bar
        ratios (clamped to [0, 1]); all zero when income <= 0
    """
    total_income = _to_amount(income, "income")
    essentials_spent = _to_amount(essentials, "essentials")
    savings_invested = _to_amount(savings, "savings")
    discretionary_spent = _to_amount(discretionary, "discretionary")

    essentials_target = total_income * Decimal(ESSENTIALS_SHARE)
    savings_target = total_income * Decimal(SAVINGS_SHARE)
    discretionary_target = total_income * Decimal(DISCRETIONARY_SHARE)

    essentials_pct, essentials_bar = _progress(essentials_spent, essentials_target)
    savings_pct, savings_bar = _progress(savings_invested, savings_target)
    discretionary_pct, discretionary_bar = _progress(discretionary_spent, discretionary_target)

    return AllocationProgress(
        total_income=total_income,
        essentials_spent=essentials_spent,
        savings_invested=savings_invested,
        discretionary_spent=discretionary_spent,
        essentials_target=essentials_target,
        savings_target=savings_target,
        discretionary_target=discretionary_target,
        essentials_progress=essentials_pct,
        savings_progress=savings_pct,
        discretionary_progress=discretionary_pct,
        essentials_progress_bar=essentials_bar,
        savings_progress_bar=savings_bar,
        discretionary_progress_bar=discretionary_bar,
        message=_allocation_message(total_income, essentials_pct, savings_pct, discretionary_pct),
    )
