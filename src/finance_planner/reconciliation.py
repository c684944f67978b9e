# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Budget reconciliation: keeps each budget's per-category ``spent`` in step
with the transaction ledger.

Two update modes are supported:

1. Incremental: ``record_added`` / ``record_deleted`` / ``record_edited``
   write the ledger and adjust ``spent`` by the transaction amount in one
   locked step. ``apply_*`` adjust ``spent`` for writes made elsewhere.
2. Full recompute: ``recompute`` rescans the ledger for one period and
   rebuilds every category from scratch. It is the source of truth and
   corrects any drift left by missed or duplicated incremental calls.

``spent`` is floored at 0 on every subtraction. Reversing an expense that
was never counted therefore leaves the category at 0 instead of going
negative.

Ledger writes, budget read-modify-write and recompute are serialized per
(owner, month, year) with an ``asyncio.Lock``. An edit that moves a
transaction between periods holds both locks, taken in a fixed order.
Alerts are dispatched after the budget is saved and outside the lock.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from finance_planner.alerts import AlertSink, LoggingAlertSink, dispatch_alert, evaluate_alert
from finance_planner.config import AlertConfig
from finance_planner.errors import BudgetNotFoundError, TransactionNotFoundError
from finance_planner.storage.interface import BudgetStore, LedgerStore
from finance_planner.types import (
    BUDGET_CATEGORY_VALUES,
    Budget,
    BudgetCategory,
    Period,
    Transaction,
)

logger = logging.getLogger("finance_planner.reconciliation")

PeriodKey = tuple[str, int, int]


@dataclass(frozen=True)
class SpentDelta:
    """One signed adjustment to a category's ``spent``."""

    category: BudgetCategory
    amount: Decimal


def expense_delta(transaction: Transaction, sign: int) -> SpentDelta | None:
    """
    The adjustment a transaction contributes to its budget, or None when it
    does not count (income, or a non-budget category such as ``other``).
    """
    if not transaction.is_expense:
        return None
    if transaction.category.value not in BUDGET_CATEGORY_VALUES:
        logger.debug(
            "reconciliation_category_untracked",
            extra={"transaction_id": transaction.id, "category": transaction.category.value},
        )
        return None
    return SpentDelta(
        category=BudgetCategory(transaction.category.value),
        amount=transaction.amount if sign > 0 else -transaction.amount,
    )


def apply_deltas(budget: Budget, deltas: list[SpentDelta]) -> None:
    """
    Apply ``deltas`` to ``budget`` in order, flooring each category at 0
    after every step. Mutates ``budget`` in place.
    """
    for delta in deltas:
        allocation = budget.categories[delta.category]
        allocation.spent = max(Decimal("0"), allocation.spent + delta.amount)


class ReconciliationEngine:
    """
    Keeps ``Budget.categories[*].spent`` consistent with the ledger.

    Transaction writes go through ``record_added`` / ``record_edited`` /
    ``record_deleted``, which perform the ledger mutation and the budget
    update under the same period lock(s). A full recompute therefore sees
    either both the write and its delta, or neither.

    Usage::

        engine = ReconciliationEngine(ledger=ledger, budgets=budgets)
        await engine.record_added(transaction)

        budget = await engine.recompute("alice", month=3, year=2026)
    """

    def __init__(
        self,
        ledger: LedgerStore,
        budgets: BudgetStore,
        alert_sink: AlertSink | None = None,
        alert_config: AlertConfig | None = None,
    ) -> None:
        self._ledger = ledger
        self._budgets = budgets
        self._alert_sink: AlertSink = alert_sink if alert_sink is not None else LoggingAlertSink()
        self._alert_config = alert_config or AlertConfig()
        # Entries disappear once no coroutine holds or waits on the lock.
        self._locks: weakref.WeakValueDictionary[PeriodKey, asyncio.Lock] = weakref.WeakValueDictionary()

    # ─── Ledger writes ────────────────────────────────────────────────────────

    async def record_added(self, transaction: Transaction) -> Budget | None:
        """Insert ``transaction`` and count it against its period's budget."""
        async with self.hold((transaction.owner, transaction.period)):
            await self._ledger.insert(transaction)
            updates = await self._apply_steps_locked([(transaction, 1)])
        await self._evaluate_updates(updates)
        return updates[0][0] if updates else None

    async def record_deleted(self, owner: str, transaction_id: str) -> Transaction:
        """
        Delete a transaction and reverse its effect on the budget.

        The record is re-read under the period lock, so two deletes of the
        same id reverse it once; the second raises.

        Raises:
            TransactionNotFoundError: If the id is unknown or owned by someone else.
        """
        while True:
            snapshot = await self._load_owned(owner, transaction_id)
            async with self.hold((owner, snapshot.period)):
                transaction = await self._load_owned(owner, transaction_id)
                if transaction.period == snapshot.period:
                    await self._ledger.delete(transaction_id)
                    updates = await self._apply_steps_locked([(transaction, -1)])
                    break
            self._log_retry(owner, transaction_id)
        await self._evaluate_updates(updates)
        return transaction

    async def record_edited(
        self,
        owner: str,
        transaction_id: str,
        rebuild: Callable[[Transaction], Transaction],
    ) -> tuple[Transaction, Transaction]:
        """
        Replace a transaction with ``rebuild(current)`` and reconcile the edit.

        The current record is read, rewritten and reconciled while both the
        old and the new period are locked. Returns ``(old, new)``.

        Raises:
            TransactionNotFoundError: If the id is unknown or owned by someone else.
        """
        while True:
            snapshot = await self._load_owned(owner, transaction_id)
            planned = rebuild(snapshot)
            locked = {snapshot.period, planned.period}
            async with self.hold(*((owner, period) for period in locked)):
                old = await self._load_owned(owner, transaction_id)
                new = rebuild(old)
                if {old.period, new.period} <= locked:
                    await self._ledger.update(new)
                    updates = await self._apply_steps_locked([(old, -1), (new, 1)])
                    break
            self._log_retry(owner, transaction_id)
        await self._evaluate_updates(updates)
        return old, new

    # ─── Incremental updates ──────────────────────────────────────────────────

    async def apply_added(self, transaction: Transaction) -> Budget | None:
        """Count an already written transaction against its period's budget."""
        updated = await self._apply_steps([(transaction, 1)])
        return updated[0] if updated else None

    async def apply_deleted(self, transaction: Transaction) -> Budget | None:
        """Reverse a deleted transaction. ``spent`` never drops below 0."""
        updated = await self._apply_steps([(transaction, -1)])
        return updated[0] if updated else None

    async def apply_edited(self, old: Transaction, new: Transaction) -> list[Budget]:
        """
        Reconcile an edit as a delete of ``old`` followed by an add of ``new``.

        When both fall in the same period the two steps are applied with one
        save. Returns the budgets that were updated.
        """
        return await self._apply_steps([(old, -1), (new, 1)])

    # ─── Full recompute ───────────────────────────────────────────────────────

    async def recompute(self, owner: str, month: int, year: int) -> Budget:
        """
        Rebuild every category's ``spent`` for one period from the ledger.

        All categories are reset to 0 and then set from the grouped expense
        scan; the result is persisted with a single save. Running it twice
        with no ledger change in between yields the same budget.

        Raises:
            BudgetNotFoundError: If no budget exists for the period.
        """
        period = Period(month=month, year=year)
        async with self.hold((owner, period)):
            budget = await self._budgets.find_by_owner_and_period(owner, month, year)
            if budget is None:
                raise BudgetNotFoundError(owner, month, year)

            totals = await self._ledger.find_expenses_by_owner_and_period(owner, month, year)
            rebuilt: dict[BudgetCategory, Decimal] = {category: Decimal("0") for category in BudgetCategory}
            for row in totals:
                if row.category.value in BUDGET_CATEGORY_VALUES:
                    rebuilt[BudgetCategory(row.category.value)] += row.amount

            updated = budget.model_copy(deep=True)
            changed: list[BudgetCategory] = []
            for category, spent in rebuilt.items():
                if updated.categories[category].spent != spent:
                    changed.append(category)
                updated.categories[category].spent = spent
            if changed:
                updated.updated_at = datetime.now(tz=timezone.utc)
                await self._budgets.save(updated)

        logger.info(
            "budget_reconciled",
            extra={
                "owner": owner,
                "period": str(period),
                "total_spent": str(updated.total_spent),
                "changed_categories": [category.value for category in changed],
            },
        )
        await self._evaluate_alerts(updated, changed)
        return updated

    # ─── Locking ──────────────────────────────────────────────────────────────

    def lock_for(self, owner: str, period: Period) -> asyncio.Lock:
        key = (owner, period.month, period.year)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, *keys: tuple[str, Period]) -> AsyncIterator[None]:
        """
        Hold the locks for every ``(owner, period)`` in ``keys``.

        Locks are taken in (owner, year, month) order, so two callers that
        need overlapping periods cannot deadlock.
        """
        ordered = sorted(set(keys), key=lambda key: (key[0], key[1].year, key[1].month))
        locks = [self.lock_for(owner, period) for owner, period in ordered]
        async with AsyncExitStack() as stack:
            for lock in locks:
                await stack.enter_async_context(lock)
            yield

    def active_lock_count(self) -> int:
        """Number of period locks currently referenced by a holder or waiter."""
        return len(self._locks)

    # ─── Private helpers ──────────────────────────────────────────────────────

    async def _load_owned(self, owner: str, transaction_id: str) -> Transaction:
        transaction = await self._ledger.get(transaction_id)
        if transaction is None or transaction.owner != owner:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def _log_retry(self, owner: str, transaction_id: str) -> None:
        logger.debug(
            "reconciliation_period_moved",
            extra={"owner": owner, "transaction_id": transaction_id},
        )

    async def _apply_steps(self, steps: list[tuple[Transaction, int]]) -> list[Budget]:
        async with self.hold(*((t.owner, t.period) for t, _ in steps)):
            updates = await self._apply_steps_locked(steps)
        await self._evaluate_updates(updates)
        return [budget for budget, _ in updates]

    async def _apply_steps_locked(
        self, steps: list[tuple[Transaction, int]]
    ) -> list[tuple[Budget, list[BudgetCategory]]]:
        by_key: dict[tuple[str, Period], list[SpentDelta]] = {}
        for transaction, sign in steps:
            delta = expense_delta(transaction, sign)
            if delta is not None:
                by_key.setdefault((transaction.owner, transaction.period), []).append(delta)

        updates: list[tuple[Budget, list[BudgetCategory]]] = []
        for (owner, period), deltas in by_key.items():
            budget = await self._apply_locked(owner, period, deltas)
            if budget is not None:
                updates.append((budget, list(dict.fromkeys(delta.category for delta in deltas))))
        return updates

    async def _apply_locked(self, owner: str, period: Period, deltas: list[SpentDelta]) -> Budget | None:
        budget = await self._budgets.find_by_owner_and_period(owner, period.month, period.year)
        if budget is None:
            logger.debug(
                "reconciliation_no_budget",
                extra={"owner": owner, "period": str(period)},
            )
            return None

        apply_deltas(budget, deltas)
        budget.updated_at = datetime.now(tz=timezone.utc)
        await self._budgets.save(budget)

        affected = list(dict.fromkeys(delta.category for delta in deltas))
        logger.info(
            "budget_spent_updated",
            extra={
                "owner": owner,
                "period": str(period),
                "categories": {
                    category.value: str(budget.categories[category].spent) for category in affected
                },
                "total_spent": str(budget.total_spent),
            },
        )
        return budget

    async def _evaluate_updates(self, updates: list[tuple[Budget, list[BudgetCategory]]]) -> None:
        for budget, categories in updates:
            await self._evaluate_alerts(budget, categories)

    async def _evaluate_alerts(self, budget: Budget, categories: list[BudgetCategory]) -> None:
        for category in categories:
            alert = evaluate_alert(category, budget.categories[category], self._alert_config)
            if alert is not None:
                await dispatch_alert(self._alert_sink, budget.owner, alert)
