# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from finance_planner.errors import DuplicatePeriodError
from finance_planner.ledger import newest_first, sum_expenses_by_category
from finance_planner.storage.interface import BudgetStore, GoalStore, LedgerStore
from finance_planner.types import Budget, ExpenseTotal, Goal, Period, Transaction

BudgetKey = tuple[str, int, int]


class MemoryLedgerStore(LedgerStore):
    """
    In-process transaction ledger, suitable for single-process use and testing.

    All state is lost when the process exits.
    """

    def __init__(self) -> None:
        self._transactions: dict[str, Transaction] = {}

    async def get(self, transaction_id: str) -> Transaction | None:
        transaction = self._transactions.get(transaction_id)
        return transaction.model_copy(deep=True) if transaction is not None else None

    async def insert(self, transaction: Transaction) -> None:
        if transaction.id in self._transactions:
            raise KeyError(f"Transaction {transaction.id!r} already exists")
        self._transactions[transaction.id] = transaction.model_copy(deep=True)

    async def update(self, transaction: Transaction) -> None:
        if transaction.id not in self._transactions:
            raise KeyError(f"Transaction {transaction.id!r} does not exist")
        self._transactions[transaction.id] = transaction.model_copy(deep=True)

    async def delete(self, transaction_id: str) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    async def list_by_owner(self, owner: str) -> list[Transaction]:
        owned = (t for t in self._transactions.values() if t.owner == owner)
        return [transaction.model_copy(deep=True) for transaction in newest_first(owned)]

    async def find_expenses_by_owner_and_period(
        self, owner: str, month: int, year: int
    ) -> list[ExpenseTotal]:
        return sum_expenses_by_category(
            self._transactions.values(), owner, Period(month=month, year=year)
        )


class MemoryBudgetStore(BudgetStore):
    """
    In-process budget store, suitable for single-process use and testing.

    All state is lost when the process exits.
    """

    def __init__(self) -> None:
        self._budgets: dict[BudgetKey, Budget] = {}

    @staticmethod
    def _key(budget: Budget) -> BudgetKey:
        return (budget.owner, budget.month, budget.year)

    async def find_by_owner_and_period(self, owner: str, month: int, year: int) -> Budget | None:
        budget = self._budgets.get((owner, month, year))
        return budget.model_copy(deep=True) if budget is not None else None

    async def create(self, budget: Budget) -> None:
        key = self._key(budget)
        if key in self._budgets:
            raise DuplicatePeriodError(budget.owner, budget.month, budget.year)
        self._budgets[key] = budget.model_copy(deep=True)

    async def save(self, budget: Budget) -> None:
        self._budgets[self._key(budget)] = budget.model_copy(deep=True)

    async def list_by_owner(self, owner: str) -> list[Budget]:
        owned = sorted(
            (budget for key, budget in self._budgets.items() if key[0] == owner),
            key=lambda budget: (budget.year, budget.month),
        )
        return [budget.model_copy(deep=True) for budget in owned]


class MemoryGoalStore(GoalStore):
    """In-process goal store. All state is lost when the process exits."""

    def __init__(self) -> None:
        self._goals: dict[str, Goal] = {}

    async def get(self, goal_id: str) -> Goal | None:
        goal = self._goals.get(goal_id)
        return goal.model_copy(deep=True) if goal is not None else None

    async def insert(self, goal: Goal) -> None:
        if goal.id in self._goals:
            raise KeyError(f"Goal {goal.id!r} already exists")
        self._goals[goal.id] = goal.model_copy(deep=True)

    async def save(self, goal: Goal) -> None:
        if goal.id not in self._goals:
            raise KeyError(f"Goal {goal.id!r} does not exist")
        self._goals[goal.id] = goal.model_copy(deep=True)

    async def delete(self, goal_id: str) -> bool:
        return self._goals.pop(goal_id, None) is not None

    async def list_by_owner(self, owner: str) -> list[Goal]:
        owned = sorted(
            (goal for goal in self._goals.values() if goal.owner == owner),
            key=lambda goal: goal.created_at,
            reverse=True,
        )
        return [goal.model_copy(deep=True) for goal in owned]
