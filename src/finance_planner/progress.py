# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from finance_planner.types import (
    Budget,
    BudgetCategory,
    BudgetProgress,
    BudgetSummary,
    CategoryAllocation,
    CategoryProgress,
    ProgressStatus,
)


def utilization_percent(allocation: CategoryAllocation) -> int:
    """Whole-number utilization percentage; 0 when nothing is planned."""
    if allocation.planned == 0:
        return 0
    ratio = allocation.spent / allocation.planned * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def progress_status(percent: int) -> ProgressStatus:
    if percent >= 100:
        return "exceeded"
    if percent >= 80:
        return "warning"
    return "normal"


def build_category_progress(category: BudgetCategory, allocation: CategoryAllocation) -> CategoryProgress:
    percent = utilization_percent(allocation)
    return CategoryProgress(
        category=category,
        planned=allocation.planned,
        spent=allocation.spent,
        remaining=allocation.planned - allocation.spent,
        utilization=percent,
        status=progress_status(percent),
        color=allocation.color,
        icon=allocation.icon,
    )


def build_budget_progress(budget: Budget) -> BudgetProgress:
    """
    Derive a progress report from a budget.

    The report is point-in-time. Reconcile the budget first if current
    ledger values are needed.
    """
    categories = [
        build_category_progress(category, budget.categories[category]) for category in BudgetCategory
    ]
    total_planned = budget.total_planned
    total_spent = budget.total_spent
    return BudgetProgress(
        owner=budget.owner,
        period=budget.period,
        categories=categories,
        summary=BudgetSummary(
            total_planned=total_planned,
            total_spent=total_spent,
            total_remaining=total_planned - total_spent,
            monthly_income=budget.monthly_income,
            savings=budget.monthly_income - total_spent,
        ),
    )
