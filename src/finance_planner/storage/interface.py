# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from abc import ABC, abstractmethod

from finance_planner.types import Budget, ExpenseTotal, Goal, Transaction


class LedgerStore(ABC):
    """
    Persistence contract for the transaction ledger.

    Implementors may back this with a document store, SQL database or any
    key-value store. The reconciliation engine only reads through
    ``find_expenses_by_owner_and_period``; the write methods are used by the
    ledger-write handlers in FinancePlanner.
    """

    # ─── Single records ───────────────────────────────────────────────────────

    @abstractmethod
    async def get(self, transaction_id: str) -> Transaction | None:
        ...

    @abstractmethod
    async def insert(self, transaction: Transaction) -> None:
        ...

    @abstractmethod
    async def update(self, transaction: Transaction) -> None:
        """Replace the stored record with the same id. KeyError if absent."""
        ...

    @abstractmethod
    async def delete(self, transaction_id: str) -> bool:
        """Remove a record. Returns True if it existed."""
        ...

    # ─── Queries ──────────────────────────────────────────────────────────────

    @abstractmethod
    async def list_by_owner(self, owner: str) -> list[Transaction]:
        """Every transaction of ``owner``, newest first."""
        ...

    @abstractmethod
    async def find_expenses_by_owner_and_period(
        self, owner: str, month: int, year: int
    ) -> list[ExpenseTotal]:
        """
        Sum expense amounts of ``owner`` dated within (month, year), grouped
        by category. Categories without expenses are omitted.
        """
        ...


class BudgetStore(ABC):
    """
    Persistence contract for budgets, keyed by (owner, month, year).

    Stores hand out copies: mutating a returned Budget has no effect until it
    is passed back to ``save``.
    """

    @abstractmethod
    async def find_by_owner_and_period(self, owner: str, month: int, year: int) -> Budget | None:
        ...

    @abstractmethod
    async def create(self, budget: Budget) -> None:
        """Persist a new budget. Raises DuplicatePeriodError if the key exists."""
        ...

    @abstractmethod
    async def save(self, budget: Budget) -> None:
        """Insert or replace the budget stored under the same key."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner: str) -> list[Budget]:
        """Every budget of ``owner``, oldest period first."""
        ...


class GoalStore(ABC):
    """Persistence contract for savings goals, keyed by goal id."""

    @abstractmethod
    async def get(self, goal_id: str) -> Goal | None:
        ...

    @abstractmethod
    async def insert(self, goal: Goal) -> None:
        """Persist a new goal. KeyError if the id exists."""
        ...

    @abstractmethod
    async def save(self, goal: Goal) -> None:
        """Replace the stored goal with the same id. KeyError if absent."""
        ...

    @abstractmethod
    async def delete(self, goal_id: str) -> bool:
        """Remove a goal. Returns True if it existed."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner: str) -> list[Goal]:
        """Every goal of ``owner``, most recently created first."""
        ...
