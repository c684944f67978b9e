# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from finance_planner.errors import InvalidAmountError, UnknownCategoryError
from finance_planner.types import (
    CATEGORY_STYLES,
    Budget,
    BudgetCategory,
    CategoryAllocation,
    Period,
)


def parse_budget_category(value: Any) -> BudgetCategory:
    """
    Decode a caller-supplied category into the closed BudgetCategory set.

    Accepts enum members or their string values (case-insensitive). Anything
    else, including the transaction-only ``other`` and ``income``, raises
    UnknownCategoryError.
    """
    if isinstance(value, BudgetCategory):
        return value
    if isinstance(value, str):
        try:
            return BudgetCategory(value.strip().lower())
        except ValueError:
            pass
    raise UnknownCategoryError(value)


def parse_amount(value: Any) -> Decimal:
    """Coerce ``value`` to a finite, non-negative Decimal or raise InvalidAmountError."""
    if isinstance(value, bool):
        raise InvalidAmountError(value, "must be numeric")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(value, "must be numeric") from None
    if not amount.is_finite():
        raise InvalidAmountError(value, "must be finite")
    if amount < 0:
        raise InvalidAmountError(value)
    return amount


def default_allocation(category: BudgetCategory, planned: Decimal = Decimal("0")) -> CategoryAllocation:
    color, icon = CATEGORY_STYLES[category]
    return CategoryAllocation(planned=planned, spent=Decimal("0"), color=color, icon=icon)


def default_categories() -> dict[BudgetCategory, CategoryAllocation]:
    """The blank template: every budget category planned at 0."""
    return {category: default_allocation(category) for category in BudgetCategory}


def create_budget(
    owner: str,
    period: Period,
    monthly_income: Any = 0,
    initial_categories: Mapping[Any, Any] | None = None,
) -> Budget:
    """
    Build a validated, unpersisted Budget for ``owner`` and ``period``.

    ``initial_categories`` maps category names to either a planned amount or a
    CategoryAllocation. Categories left out start from the blank template.
    Uniqueness of (owner, period) is enforced by the budget store, not here.

    Raises UnknownCategoryError or InvalidAmountError on bad input.
    """
    income = parse_amount(monthly_income)
    categories = default_categories()
    for raw_category, value in (initial_categories or {}).items():
        category = parse_budget_category(raw_category)
        if isinstance(value, CategoryAllocation):
            categories[category] = CategoryAllocation(
                planned=parse_amount(value.planned),
                spent=parse_amount(value.spent),
                color=value.color,
                icon=value.icon,
            )
        else:
            categories[category] = default_allocation(category, parse_amount(value))

    return Budget(
        owner=owner,
        month=period.month,
        year=period.year,
        categories=categories,
        monthly_income=income,
    )


def set_category_planned(budget: Budget, category: Any, amount: Any) -> Budget:
    """
    Return a copy of ``budget`` with one category's planned amount replaced.

    The input budget is never mutated, so a rejected update leaves prior
    state untouched.
    """
    return set_planned_amounts(budget, {category: amount})


def set_planned_amounts(budget: Budget, amounts: Mapping[Any, Any]) -> Budget:
    """
    Return a copy of ``budget`` with several planned amounts replaced.

    Every entry is validated before any is applied.
    """
    validated = {parse_budget_category(key): parse_amount(value) for key, value in amounts.items()}

    updated = budget.model_copy(deep=True)
    for category, planned in validated.items():
        updated.categories[category].planned = planned
    updated.updated_at = datetime.now(tz=timezone.utc)
    return updated


def recompute_totals(budget: Budget) -> tuple[Decimal, Decimal]:
    """Return ``(total_planned, total_spent)`` summed from the category map."""
    return budget.total_planned, budget.total_spent
