# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import Any


class FinancePlannerError(Exception):
    """Base class for all finance-planner errors."""

    def __init__(self, message: str, code: str = "FINANCE_PLANNER_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class DuplicatePeriodError(FinancePlannerError):
    """
    Raised when a budget already exists for an owner and period.

    Attributes:
        owner: The owner whose budget collided.
        month: The month of the existing budget.
        year: The year of the existing budget.
    """

    def __init__(self, owner: str, month: int, year: int) -> None:
        super().__init__(
            f"Budget for {month:02d}/{year} already exists for owner '{owner}'.",
            code="DUPLICATE_PERIOD",
        )
        self.owner = owner
        self.month = month
        self.year = year


class UnknownCategoryError(FinancePlannerError):
    """Raised when a category is outside the fixed set of budget categories."""

    def __init__(self, category: Any) -> None:
        from finance_planner.types import BUDGET_CATEGORY_VALUES

        super().__init__(
            f"'{category}' is not a budget category. "
            f"Valid values: {sorted(BUDGET_CATEGORY_VALUES)}.",
            code="UNKNOWN_CATEGORY",
        )
        self.category = category


class InvalidAmountError(FinancePlannerError):
    """Raised when an amount is negative, non-numeric or not finite."""

    def __init__(self, amount: Any, reason: str = "must be a non-negative number") -> None:
        super().__init__(f"Invalid amount {amount!r}: {reason}.", code="INVALID_AMOUNT")
        self.amount = amount


class BudgetNotFoundError(FinancePlannerError):
    """Raised when an operation needs a budget for a period that has none."""

    def __init__(self, owner: str, month: int, year: int) -> None:
        super().__init__(
            f"No budget for {month:02d}/{year} exists for owner '{owner}'. "
            "Create it first with FinancePlanner.create_budget().",
            code="BUDGET_NOT_FOUND",
        )
        self.owner = owner
        self.month = month
        self.year = year


class TransactionNotFoundError(FinancePlannerError):
    """Raised when a transaction id is unknown or belongs to another owner."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            f"Transaction '{transaction_id}' not found.",
            code="TRANSACTION_NOT_FOUND",
        )
        self.transaction_id = transaction_id


class ConfigurationError(FinancePlannerError):
    """Raised when the planner is misconfigured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


class GoalNotFoundError(FinancePlannerError):
    """Raised when a goal id is unknown or belongs to another owner."""

    def __init__(self, goal_id: str) -> None:
        super().__init__(f"Goal '{goal_id}' not found.", code="GOAL_NOT_FOUND")
        self.goal_id = goal_id


class InvalidDeadlineError(FinancePlannerError):
    """Raised when a goal deadline is not in the future."""

    def __init__(self, deadline: Any) -> None:
        super().__init__(f"Deadline {deadline!r} must be a future date.", code="INVALID_DEADLINE")
        self.deadline = deadline


class GoalClosedError(FinancePlannerError):
    """Raised when money is added to a cancelled goal."""

    def __init__(self, goal_id: str) -> None:
        super().__init__(
            f"Goal '{goal_id}' is cancelled and no longer accepts contributions.",
            code="GOAL_CLOSED",
        )
        self.goal_id = goal_id
