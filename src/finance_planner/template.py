# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Income-based budget template (the 50/30/20 split).

Half of the declared income goes to needs, 30% to wants and 20% straight to
savings. Each pool is then divided across its categories by fixed weights.
Percentages are STATIC: they are not configurable per call.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from finance_planner.budget import create_budget, parse_amount
from finance_planner.types import Budget, BudgetCategory, Period

NEEDS_SHARE = Decimal("0.50")
WANTS_SHARE = Decimal("0.30")
SAVINGS_SHARE = Decimal("0.20")

NEEDS_WEIGHTS: dict[BudgetCategory, Decimal] = {
    BudgetCategory.FOOD: Decimal("0.30"),
    BudgetCategory.TRANSPORT: Decimal("0.20"),
    BudgetCategory.BILLS: Decimal("0.30"),
    BudgetCategory.HEALTHCARE: Decimal("0.20"),
}

WANTS_WEIGHTS: dict[BudgetCategory, Decimal] = {
    BudgetCategory.ENTERTAINMENT: Decimal("0.40"),
    BudgetCategory.SHOPPING: Decimal("0.40"),
    BudgetCategory.EDUCATION: Decimal("0.20"),
}


def round_currency(amount: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero."""
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def suggest_allocations(monthly_income: Any) -> dict[BudgetCategory, Decimal]:
    """
    Split ``monthly_income`` into a planned amount per budget category.

    Each value is rounded independently, so the total may differ from the
    income by a few units. That drift is accepted, not corrected.
    """
    income = parse_amount(monthly_income)
    needs = income * NEEDS_SHARE
    wants = income * WANTS_SHARE
    savings_pool = income * SAVINGS_SHARE

    allocations: dict[BudgetCategory, Decimal] = {}
    for category, weight in NEEDS_WEIGHTS.items():
        allocations[category] = round_currency(needs * weight)
    for category, weight in WANTS_WEIGHTS.items():
        allocations[category] = round_currency(wants * weight)
    allocations[BudgetCategory.SAVINGS] = round_currency(savings_pool)
    return allocations


def suggest_budget(owner: str, monthly_income: Any, period: Period) -> Budget:
    """
    Build an unpersisted Budget candidate from a declared monthly income.

    Pass the result to ``BudgetStore.create`` (or use
    ``FinancePlanner.create_smart_budget``) to persist it.
    """
    return create_budget(
        owner=owner,
        period=period,
        monthly_income=monthly_income,
        initial_categories=suggest_allocations(monthly_income),
    )
