# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Savings goals: a target amount to reach by a deadline.

Contributions only ever add to ``current_amount``. A goal whose progress
reaches 100% moves from ``active`` to ``completed`` on the same update.

``goal_plan`` answers the planning question on its own, without a stored
goal: how much must be put aside each month, and how realistic that is
given the monthly income.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from finance_planner.budget import parse_amount
from finance_planner.errors import GoalClosedError, InvalidAmountError, InvalidDeadlineError
from finance_planner.template import round_currency
from finance_planner.types import (
    Goal,
    GoalCategory,
    GoalFeasibility,
    GoalPlan,
    GoalsOverview,
    GoalStatus,
)

ProgressLevel = Literal["success", "info", "warning", "danger"]

# Savings-to-income ratio thresholds, inclusive upper bounds.
HIGH_FEASIBILITY_RATIO = Decimal("0.2")
MEDIUM_FEASIBILITY_RATIO = Decimal("0.4")

_PROBABILITY_BANDS: tuple[tuple[Decimal, int], ...] = (
    (Decimal("0.2"), 90),
    (Decimal("0.3"), 75),
    (Decimal("0.4"), 50),
)
_FLOOR_PROBABILITY = 25

STRETCH_SUGGESTIONS = (
    "Consider increasing income sources",
    "Review and reduce discretionary spending by 20%",
    "Extend timeline to make it more achievable",
)
TIGHT_SUGGESTIONS = (
    "Optimize recurring expenses and subscriptions",
    "Look for better deals on regular purchases",
)
ON_TRACK_SUGGESTIONS = (
    "You're on track! Maintain financial discipline",
    "Consider automating your savings",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _positive(value: Any, what: str) -> Decimal:
    amount = parse_amount(value)
    if amount <= 0:
        raise InvalidAmountError(value, f"{what} must be positive")
    return amount


def build_goal(
    owner: str,
    name: str,
    target_amount: Any,
    deadline: datetime,
    category: str | GoalCategory = GoalCategory.OTHER,
    description: str = "",
    today: datetime | None = None,
) -> Goal:
    """
    Build a new active goal with nothing saved yet.

    Raises:
        InvalidAmountError: If the target is not a positive number.
        InvalidDeadlineError: If the deadline is not after ``today``.
    """
    target = _positive(target_amount, "target amount")
    now = _as_utc(today) if today is not None else datetime.now(tz=timezone.utc)
    if _as_utc(deadline) <= now:
        raise InvalidDeadlineError(deadline)
    return Goal.model_validate(
        {
            "owner": owner,
            "name": name,
            "description": description or "",
            "target_amount": target,
            "deadline": deadline,
            "category": category.lower() if isinstance(category, str) else category,
        }
    )


def contribute(goal: Goal, amount: Any) -> Goal:
    """
    Return a copy of ``goal`` with ``amount`` added to what is saved.

    An active goal that reaches its target is marked completed. Saving past
    the target is allowed; progress stays capped at 100.

    Raises:
        InvalidAmountError: If the amount is negative or not numeric.
        GoalClosedError: If the goal was cancelled.
    """
    value = parse_amount(amount)
    if goal.status is GoalStatus.CANCELLED:
        raise GoalClosedError(goal.id)
    updated = goal.model_copy(deep=True)
    updated.current_amount = goal.current_amount + value
    if updated.progress >= 100 and updated.status is GoalStatus.ACTIVE:
        updated.status = GoalStatus.COMPLETED
    updated.updated_at = datetime.now(tz=timezone.utc)
    return updated


def days_left(goal: Goal, today: datetime | None = None) -> int:
    """Whole days until the deadline, rounded up. Never negative."""
    now = _as_utc(today) if today is not None else datetime.now(tz=timezone.utc)
    remaining = _as_utc(goal.deadline) - now
    days = remaining.days + (1 if remaining.seconds or remaining.microseconds else 0)
    return max(0, days)


def progress_level(progress: int) -> ProgressLevel:
    """Display level for a progress percentage."""
    if progress >= 100:
        return "success"
    if progress >= 70:
        return "info"
    if progress >= 40:
        return "warning"
    return "danger"


def summarize_goals(goals: list[Goal]) -> GoalsOverview:
    total_saved = sum((goal.current_amount for goal in goals), Decimal("0"))
    total_target = sum((goal.target_amount for goal in goals), Decimal("0"))
    overall = int(round_currency(total_saved / total_target * 100)) if total_target > 0 else 0
    return GoalsOverview(
        goals=goals,
        total_saved=total_saved,
        total_target=total_target,
        overall_progress=overall,
    )


# ─── Planning ─────────────────────────────────────────────────────────────────


def assess_feasibility(savings_ratio: Decimal) -> GoalFeasibility:
    if savings_ratio <= HIGH_FEASIBILITY_RATIO:
        return "high"
    if savings_ratio <= MEDIUM_FEASIBILITY_RATIO:
        return "medium"
    return "low"


def goal_suggestions(savings_ratio: Decimal) -> list[str]:
    if savings_ratio > MEDIUM_FEASIBILITY_RATIO:
        return list(STRETCH_SUGGESTIONS)
    if savings_ratio > Decimal("0.25"):
        return list(TIGHT_SUGGESTIONS)
    return list(ON_TRACK_SUGGESTIONS)


def achievement_probability(savings_ratio: Decimal) -> int:
    for bound, probability in _PROBABILITY_BANDS:
        if savings_ratio <= bound:
            return probability
    return _FLOOR_PROBABILITY


def goal_plan(
    target_amount: Any,
    current_savings: Any,
    timeline_months: int,
    monthly_income: Any,
) -> GoalPlan:
    """
    Work out the monthly saving needed to reach ``target_amount`` in
    ``timeline_months`` and rate it against ``monthly_income``.

    Savings already at or above the target need nothing more per month.
    The ratio is computed before rounding; only the reported monthly
    amount is rounded to whole currency units.

    Raises:
        InvalidAmountError: If an amount is negative or not numeric, or the
            income is zero.
        ValueError: If ``timeline_months`` is not a positive integer.
    """
    target = parse_amount(target_amount)
    saved = parse_amount(current_savings)
    income = _positive(monthly_income, "monthly income")
    if isinstance(timeline_months, bool) or not isinstance(timeline_months, int) or timeline_months < 1:
        raise ValueError(f"timeline_months must be a positive integer, got {timeline_months!r}")

    monthly = max(Decimal("0"), target - saved) / timeline_months
    ratio = monthly / income
    return GoalPlan(
        monthly_savings_needed=round_currency(monthly),
        timeline_months=timeline_months,
        feasibility=assess_feasibility(ratio),
        suggestions=goal_suggestions(ratio),
        achievement_probability=achievement_probability(ratio),
    )


def plan_for_goal(goal: Goal, monthly_income: Any, today: datetime | None = None) -> GoalPlan:
    """``goal_plan`` for a stored goal, counting whole months left to its deadline."""
    months = max(1, -(-days_left(goal, today) // 30))
    return goal_plan(goal.target_amount, goal.current_amount, months, monthly_income)
