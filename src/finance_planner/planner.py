# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from finance_planner.alerts import AlertSink
from finance_planner.budget import create_budget, set_planned_amounts
from finance_planner.config import PlannerConfig
from finance_planner.errors import BudgetNotFoundError, GoalNotFoundError, TransactionNotFoundError
from finance_planner.goals import build_goal, contribute, plan_for_goal, summarize_goals
from finance_planner.insights import generate_insights, summarize_spending
from finance_planner.ledger import (
    build_transaction,
    filter_transactions,
    monthly_summary,
    paginate,
    period_stats,
)
from finance_planner.progress import build_budget_progress
from finance_planner.reconciliation import ReconciliationEngine
from finance_planner.storage.interface import BudgetStore, GoalStore, LedgerStore
from finance_planner.storage.memory import MemoryBudgetStore, MemoryGoalStore, MemoryLedgerStore
from finance_planner.template import suggest_budget
from finance_planner.types import (
    Budget,
    BudgetProgress,
    Goal,
    GoalCategory,
    GoalPlan,
    GoalsOverview,
    GoalStatus,
    MonthlyTotals,
    Period,
    PeriodStats,
    Transaction,
    TransactionFilter,
    TransactionPage,
)

logger = logging.getLogger("finance_planner.planner")

_EDITABLE_FIELDS = frozenset({"amount", "category", "kind", "date", "description", "payment_method"})


class FinancePlanner:
    """
    Ledger-write handlers and budget operations over injected stores.

    Design contract
    ---------------
    - Every transaction write is persisted to the ledger and reconciled
      against its period's budget while that period's lock is held, so a
      concurrent full recompute never counts a write twice.
    - Edits and deletes re-read the stored record under the lock.
    - Spending in a period without a budget is stored but untracked.
    - Validation failures raise before anything is written.
    - Alert delivery never fails a write.

    Usage
    -----
    ::

        planner = FinancePlanner()
        await planner.create_smart_budget("alice", monthly_income=50_000, month=3, year=2026)
        await planner.add_transaction("alice", 450, "food", "expense", date=datetime(2026, 3, 4))
        progress = await planner.budget_progress("alice", month=3, year=2026)
    """

    def __init__(
        self,
        ledger: LedgerStore | None = None,
        budgets: BudgetStore | None = None,
        alert_sink: AlertSink | None = None,
        config: PlannerConfig | None = None,
        goals: GoalStore | None = None,
    ) -> None:
        self._config = config or PlannerConfig()
        self._ledger: LedgerStore = ledger if ledger is not None else MemoryLedgerStore()
        self._budgets: BudgetStore = budgets if budgets is not None else MemoryBudgetStore()
        self._goals: GoalStore = goals if goals is not None else MemoryGoalStore()
        self._goal_lock = asyncio.Lock()
        self._engine = ReconciliationEngine(
            ledger=self._ledger,
            budgets=self._budgets,
            alert_sink=alert_sink,
            alert_config=self._config.alerts,
        )

    @property
    def engine(self) -> ReconciliationEngine:
        return self._engine

    # ─── Transactions ─────────────────────────────────────────────────────────

    async def add_transaction(
        self,
        owner: str,
        amount: Any,
        category: str,
        kind: str,
        date: datetime | None = None,
        description: str = "",
        payment_method: str = "cash",
    ) -> Transaction:
        """Record a transaction and count it against its period's budget."""
        transaction = build_transaction(
            owner=owner,
            amount=amount,
            category=category,
            kind=kind,
            date=date,
            description=description,
            payment_method=payment_method,
        )
        await self._engine.record_added(transaction)
        logger.info(
            "transaction_added",
            extra={"owner": owner, "transaction_id": transaction.id, "kind": transaction.kind},
        )
        return transaction

    async def update_transaction(self, owner: str, transaction_id: str, **changes: Any) -> Transaction:
        """
        Edit a transaction and reconcile the change.

        Only amount, category, kind, date, description and payment_method may
        change. Unknown fields raise TypeError.

        Raises:
            TransactionNotFoundError: If the id is unknown or owned by someone else.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update transaction fields: {sorted(unknown)}")

        def rebuild(old: Transaction) -> Transaction:
            merged = {
                "amount": old.amount,
                "category": old.category,
                "kind": old.kind,
                "date": old.date,
                "description": old.description,
                "payment_method": old.payment_method,
            }
            merged.update({key: value for key, value in changes.items() if value is not None})
            rebuilt = build_transaction(owner=owner, **merged)
            return rebuilt.model_copy(update={"id": old.id, "created_at": old.created_at})

        _, new = await self._engine.record_edited(owner, transaction_id, rebuild)
        logger.info("transaction_updated", extra={"owner": owner, "transaction_id": transaction_id})
        return new

    async def delete_transaction(self, owner: str, transaction_id: str) -> Transaction:
        """Remove a transaction and reverse its effect on the budget."""
        transaction = await self._engine.record_deleted(owner, transaction_id)
        logger.info("transaction_deleted", extra={"owner": owner, "transaction_id": transaction_id})
        return transaction

    async def get_transaction(self, owner: str, transaction_id: str) -> Transaction:
        return await self._require_transaction(owner, transaction_id)

    async def list_transactions(
        self,
        owner: str,
        transaction_filter: TransactionFilter | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> TransactionPage:
        """One page of ``owner``'s transactions, newest first, optionally filtered."""
        transactions = filter_transactions(await self._ledger.list_by_owner(owner), transaction_filter)
        return paginate(transactions, page=page, limit=limit or self._config.default_page_size)

    async def recent_transactions(self, owner: str, limit: int | None = None) -> list[Transaction]:
        transactions = await self._ledger.list_by_owner(owner)
        return transactions[: limit or self._config.recent_limit]

    async def period_stats(self, owner: str, month: int, year: int) -> PeriodStats:
        return period_stats(await self._ledger.list_by_owner(owner), Period(month=month, year=year))

    async def monthly_summary(
        self, owner: str, months: int = 6, today: datetime | None = None
    ) -> list[MonthlyTotals]:
        return monthly_summary(await self._ledger.list_by_owner(owner), months=months, today=today)

    async def insights(self, owner: str, month: int, year: int) -> list[str]:
        """Canned recommendations for ``owner``'s activity in one period."""
        period = Period(month=month, year=year)
        transactions = [t for t in await self._ledger.list_by_owner(owner) if period.contains(t.date)]
        return generate_insights(summarize_spending(transactions))

    # ─── Budgets ──────────────────────────────────────────────────────────────

    async def create_budget(
        self,
        owner: str,
        month: int,
        year: int,
        monthly_income: Any = 0,
        categories: Mapping[Any, Any] | None = None,
    ) -> Budget:
        """
        Create a budget for one period from explicit planned amounts.

        Raises:
            DuplicatePeriodError: If the owner already has a budget for the period.
            UnknownCategoryError, InvalidAmountError: On bad input.
        """
        budget = create_budget(owner, Period(month=month, year=year), monthly_income, categories)
        await self._budgets.create(budget)
        logger.info("budget_created", extra={"owner": owner, "period": str(budget.period)})
        return budget

    async def create_smart_budget(self, owner: str, monthly_income: Any, month: int, year: int) -> Budget:
        """Create a budget whose planned amounts follow the 50/30/20 template."""
        budget = suggest_budget(owner, monthly_income, Period(month=month, year=year))
        await self._budgets.create(budget)
        logger.info(
            "budget_created",
            extra={"owner": owner, "period": str(budget.period), "template": "50/30/20"},
        )
        return budget

    async def get_budget(self, owner: str, month: int, year: int) -> Budget | None:
        return await self._budgets.find_by_owner_and_period(owner, month, year)

    async def list_budgets(self, owner: str) -> list[Budget]:
        return await self._budgets.list_by_owner(owner)

    async def current_budget(
        self,
        owner: str,
        today: datetime | None = None,
        reconcile: bool = True,
    ) -> Budget | None:
        """
        The budget for the period containing ``today`` (default: now).

        With ``reconcile`` set, the budget is rebuilt from the ledger before it
        is returned.
        """
        period = Period.current(today)
        budget = await self._budgets.find_by_owner_and_period(owner, period.month, period.year)
        if budget is None or not reconcile:
            return budget
        return await self._engine.recompute(owner, period.month, period.year)

    async def set_category_planned(
        self, owner: str, month: int, year: int, category: Any, amount: Any
    ) -> Budget:
        return await self.update_planned(owner, month, year, {category: amount})

    async def update_planned(
        self, owner: str, month: int, year: int, amounts: Mapping[Any, Any]
    ) -> Budget:
        """
        Replace planned amounts for several categories at once.

        All entries are validated before the budget is saved; a bad entry
        leaves the stored budget unchanged.
        """
        async with self._engine.hold((owner, Period(month=month, year=year))):
            budget = await self._budgets.find_by_owner_and_period(owner, month, year)
            if budget is None:
                raise BudgetNotFoundError(owner, month, year)
            updated = set_planned_amounts(budget, amounts)
            await self._budgets.save(updated)
        logger.info(
            "budget_planned_updated",
            extra={
                "owner": owner,
                "period": str(updated.period),
                "categories": sorted(str(key) for key in amounts),
            },
        )
        return updated

    async def reconcile(self, owner: str, month: int, year: int) -> Budget:
        """Full recompute of one period's spent amounts from the ledger."""
        return await self._engine.recompute(owner, month, year)

    async def budget_progress(self, owner: str, month: int, year: int) -> BudgetProgress | None:
        budget = await self._budgets.find_by_owner_and_period(owner, month, year)
        if budget is None:
            return None
        return build_budget_progress(budget)

    # ─── Savings goals ────────────────────────────────────────────────────────

    async def create_goal(
        self,
        owner: str,
        name: str,
        target_amount: Any,
        deadline: datetime,
        category: str | GoalCategory = GoalCategory.OTHER,
        description: str = "",
        today: datetime | None = None,
    ) -> Goal:
        """
        Start saving towards a target.

        Raises:
            InvalidAmountError: If the target is not a positive number.
            InvalidDeadlineError: If the deadline is not in the future.
        """
        goal = build_goal(owner, name, target_amount, deadline, category, description, today=today)
        await self._goals.insert(goal)
        logger.info(
            "goal_created",
            extra={"owner": owner, "goal_id": goal.id, "target_amount": str(goal.target_amount)},
        )
        return goal

    async def list_goals(self, owner: str) -> list[Goal]:
        """Every goal of ``owner``, most recently created first."""
        return await self._goals.list_by_owner(owner)

    async def goals_overview(self, owner: str) -> GoalsOverview:
        return summarize_goals(await self._goals.list_by_owner(owner))

    async def get_goal(self, owner: str, goal_id: str) -> Goal:
        return await self._require_goal(owner, goal_id)

    async def add_to_goal(self, owner: str, goal_id: str, amount: Any) -> Goal:
        """
        Add ``amount`` to what is saved towards a goal. Reaching the target
        marks the goal completed.

        Raises:
            GoalNotFoundError: If the id is unknown or owned by someone else.
            GoalClosedError: If the goal was cancelled.
        """
        async with self._goal_lock:
            goal = contribute(await self._require_goal(owner, goal_id), amount)
            await self._goals.save(goal)
        logger.info(
            "goal_contribution_added",
            extra={
                "owner": owner,
                "goal_id": goal_id,
                "current_amount": str(goal.current_amount),
                "status": goal.status.value,
            },
        )
        return goal

    async def cancel_goal(self, owner: str, goal_id: str) -> Goal:
        async with self._goal_lock:
            goal = await self._require_goal(owner, goal_id)
            goal.status = GoalStatus.CANCELLED
            goal.updated_at = datetime.now(tz=timezone.utc)
            await self._goals.save(goal)
        logger.info("goal_cancelled", extra={"owner": owner, "goal_id": goal_id})
        return goal

    async def delete_goal(self, owner: str, goal_id: str) -> Goal:
        async with self._goal_lock:
            goal = await self._require_goal(owner, goal_id)
            await self._goals.delete(goal_id)
        logger.info("goal_deleted", extra={"owner": owner, "goal_id": goal_id})
        return goal

    async def goal_plan(
        self, owner: str, goal_id: str, monthly_income: Any, today: datetime | None = None
    ) -> GoalPlan:
        """Monthly saving needed to reach a stored goal by its deadline."""
        goal = await self._require_goal(owner, goal_id)
        return plan_for_goal(goal, monthly_income, today=today)

    # ─── Private helpers ──────────────────────────────────────────────────────

    async def _require_transaction(self, owner: str, transaction_id: str) -> Transaction:
        transaction = await self._ledger.get(transaction_id)
        if transaction is None or transaction.owner != owner:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    async def _require_goal(self, owner: str, goal_id: str) -> Goal:
        goal = await self._goals.get(goal_id)
        if goal is None or goal.owner != owner:
            raise GoalNotFoundError(goal_id)
        return goal
