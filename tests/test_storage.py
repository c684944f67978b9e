# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for the memory and NDJSON file storage backends."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from finance_planner.budget import create_budget
from finance_planner.errors import DuplicatePeriodError
from finance_planner.goals import build_goal, contribute
from finance_planner.ledger import build_transaction
from finance_planner.planner import FinancePlanner
from finance_planner.storage import (
    FileBudgetStore,
    FileGoalStore,
    FileLedgerStore,
    MemoryBudgetStore,
    MemoryGoalStore,
    MemoryLedgerStore,
)
from finance_planner.types import (
    BudgetCategory,
    Goal,
    GoalStatus,
    Period,
    Transaction,
    TransactionCategory,
)

OWNER = "user-001"
MARCH = Period(month=3, year=2026)


def _expense(amount: int, category: str = "food", day: int = 5, owner: str = OWNER) -> Transaction:
    return build_transaction(
        owner, amount, category, "expense", date=datetime(2026, 3, day, tzinfo=timezone.utc)
    )


# ---------------------------------------------------------------------------
# TestFileLedgerStore
# ---------------------------------------------------------------------------


class TestFileLedgerStore:
    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")
        assert asyncio.run(store.list_by_owner(OWNER)) == []
        assert asyncio.run(store.get("nope")) is None

    def test_round_trip(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")
        transaction = build_transaction(
            OWNER,
            "1234.56",
            "shopping",
            "expense",
            date=datetime(2026, 3, 9, 18, 45, tzinfo=timezone.utc),
            description="headphones",
            payment_method="upi",
        )

        async def scenario() -> Transaction | None:
            await store.insert(transaction)
            return await store.get(transaction.id)

        loaded = asyncio.run(scenario())
        assert loaded is not None
        assert loaded.model_dump() == transaction.model_dump()
        assert loaded.amount == Decimal("1234.56")

    def test_duplicate_insert_raises(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")
        transaction = _expense(10)

        async def scenario() -> None:
            await store.insert(transaction)
            await store.insert(transaction)

        with pytest.raises(KeyError):
            asyncio.run(scenario())

    def test_update_and_delete(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")
        first, second = _expense(10, day=1), _expense(20, day=2)

        async def scenario() -> tuple[list[Transaction], bool]:
            await store.insert(first)
            await store.insert(second)
            await store.update(first.model_copy(update={"amount": Decimal("15")}))
            deleted = await store.delete(second.id)
            missing = await store.delete(second.id)
            assert missing is False
            return await store.list_by_owner(OWNER), deleted

        remaining, deleted = asyncio.run(scenario())
        assert deleted is True
        assert [t.amount for t in remaining] == [Decimal("15")]
        assert not (tmp_path / "ledger.jsonl.tmp").exists()

    def test_update_missing_raises(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")
        with pytest.raises(KeyError):
            asyncio.run(store.update(_expense(10)))

    def test_find_expenses_groups_by_category(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "ledger.jsonl")

        async def scenario() -> dict[TransactionCategory, Decimal]:
            for transaction in (
                _expense(10, "food"),
                _expense(15, "food", day=20),
                _expense(7, "bills"),
                _expense(99, "food", owner="user-002"),
                build_transaction(OWNER, 500, "income", "income", date=datetime(2026, 3, 1)),
                build_transaction(OWNER, 40, "food", "expense", date=datetime(2026, 4, 1)),
            ):
                await store.insert(transaction)
            rows = await store.find_expenses_by_owner_and_period(OWNER, 3, 2026)
            return {row.category: row.amount for row in rows}

        assert asyncio.run(scenario()) == {
            TransactionCategory.FOOD: Decimal("25"),
            TransactionCategory.BILLS: Decimal("7"),
        }

    def test_corrupt_lines_are_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "ledger.jsonl"
        store = FileLedgerStore(path)
        transaction = _expense(10)

        asyncio.run(store.insert(transaction))
        with path.open("a", encoding="utf-8") as handle:
            handle.write("{not json\n")
            handle.write('{"owner": "user-001"}\n')

        with caplog.at_level(logging.WARNING, logger="finance_planner.storage"):
            listed = asyncio.run(store.list_by_owner(OWNER))
        assert [t.id for t in listed] == [transaction.id]
        skipped = [r for r in caplog.records if r.getMessage() == "storage_line_skipped"]
        assert len(skipped) == 2


# ---------------------------------------------------------------------------
# TestFileBudgetStore
# ---------------------------------------------------------------------------


class TestFileBudgetStore:
    def test_round_trip_keeps_decimal_and_categories(self, tmp_path: Path) -> None:
        store = FileBudgetStore(tmp_path / "budgets.jsonl")
        budget = create_budget(
            OWNER, MARCH, monthly_income="45000.50", initial_categories={"food": "1200.25"}
        )

        async def scenario() -> Any:
            await store.create(budget)
            return await store.find_by_owner_and_period(OWNER, 3, 2026)

        loaded = asyncio.run(scenario())
        assert loaded.model_dump() == budget.model_dump()
        assert loaded.categories[BudgetCategory.FOOD].planned == Decimal("1200.25")
        assert loaded.total_planned == Decimal("1200.25")

    def test_duplicate_create_raises(self, tmp_path: Path) -> None:
        store = FileBudgetStore(tmp_path / "budgets.jsonl")

        async def scenario() -> None:
            await store.create(create_budget(OWNER, MARCH))
            await store.create(create_budget(OWNER, MARCH))

        with pytest.raises(DuplicatePeriodError):
            asyncio.run(scenario())

    def test_save_replaces_existing(self, tmp_path: Path) -> None:
        store = FileBudgetStore(tmp_path / "budgets.jsonl")

        async def scenario() -> Any:
            budget = create_budget(OWNER, MARCH)
            await store.create(budget)
            await store.create(create_budget(OWNER, Period(month=1, year=2026)))
            budget.categories[BudgetCategory.BILLS].spent = Decimal("99")
            await store.save(budget)
            return await store.list_by_owner(OWNER)

        listed = asyncio.run(scenario())
        assert [(b.month, b.year) for b in listed] == [(1, 2026), (3, 2026)]
        assert listed[1].categories[BudgetCategory.BILLS].spent == Decimal("99")

    def test_planner_over_file_stores(self, tmp_path: Path) -> None:
        ledger_path = tmp_path / "ledger.jsonl"
        budgets_path = tmp_path / "budgets.jsonl"

        async def write() -> None:
            planner = FinancePlanner(
                ledger=FileLedgerStore(ledger_path), budgets=FileBudgetStore(budgets_path)
            )
            await planner.create_budget(OWNER, 3, 2026, categories={"food": 500})
            tx = await planner.add_transaction(OWNER, 120, "food", "expense", date=datetime(2026, 3, 2))
            await planner.add_transaction(OWNER, 30, "food", "expense", date=datetime(2026, 3, 3))
            await planner.delete_transaction(OWNER, tx.id)

        async def reopen() -> tuple[Any, Any]:
            planner = FinancePlanner(
                ledger=FileLedgerStore(ledger_path), budgets=FileBudgetStore(budgets_path)
            )
            stored = await planner.get_budget(OWNER, 3, 2026)
            return stored, await planner.reconcile(OWNER, 3, 2026)

        asyncio.run(write())
        stored, reconciled = asyncio.run(reopen())
        assert stored.categories[BudgetCategory.FOOD].spent == Decimal("30")
        assert reconciled.categories[BudgetCategory.FOOD].spent == Decimal("30")


# ---------------------------------------------------------------------------
# TestFileGoalStore
# ---------------------------------------------------------------------------


def _goal(name: str = "Bike", owner: str = OWNER) -> Goal:
    return build_goal(
        owner,
        name,
        "15000.75",
        datetime(2026, 12, 31, tzinfo=timezone.utc),
        "vehicle",
        today=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


class TestFileGoalStore:
    def test_round_trip(self, tmp_path: Path) -> None:
        store = FileGoalStore(tmp_path / "goals.jsonl")
        goal = contribute(_goal(), "15000.75")

        async def scenario() -> Goal | None:
            await store.insert(goal)
            return await store.get(goal.id)

        loaded = asyncio.run(scenario())
        assert loaded is not None
        assert loaded.model_dump() == goal.model_dump()
        assert loaded.status is GoalStatus.COMPLETED
        assert loaded.progress == 100

    def test_save_delete_and_list(self, tmp_path: Path) -> None:
        store = FileGoalStore(tmp_path / "goals.jsonl")
        first, second = _goal("Bike"), _goal("Trip")
        second = second.model_copy(update={"created_at": first.created_at.replace(year=2027)})

        async def scenario() -> tuple[list[Goal], bool, bool]:
            await store.insert(first)
            await store.insert(second)
            await store.insert(_goal("Theirs", owner="user-002"))
            await store.save(contribute(first, 100))
            listed = await store.list_by_owner(OWNER)
            deleted = await store.delete(second.id)
            missing = await store.delete(second.id)
            return listed, deleted, missing

        listed, deleted, missing = asyncio.run(scenario())
        assert [goal.name for goal in listed] == ["Trip", "Bike"]
        assert listed[1].current_amount == Decimal("100")
        assert deleted is True
        assert missing is False

    def test_save_missing_and_duplicate_insert_raise(self, tmp_path: Path) -> None:
        store = FileGoalStore(tmp_path / "goals.jsonl")
        goal = _goal()
        with pytest.raises(KeyError):
            asyncio.run(store.save(goal))

        async def twice() -> None:
            await store.insert(goal)
            await store.insert(goal)

        with pytest.raises(KeyError):
            asyncio.run(twice())

    def test_planner_over_file_goal_store(self, tmp_path: Path) -> None:
        path = tmp_path / "goals.jsonl"

        async def write() -> str:
            planner = FinancePlanner(goals=FileGoalStore(path))
            goal = await planner.create_goal(
                OWNER, "Bike", 1000, datetime(2099, 1, 1, tzinfo=timezone.utc), "vehicle"
            )
            await planner.add_to_goal(OWNER, goal.id, 400)
            return goal.id

        async def reopen(goal_id: str) -> Goal:
            return await FinancePlanner(goals=FileGoalStore(path)).get_goal(OWNER, goal_id)

        goal = asyncio.run(reopen(asyncio.run(write())))
        assert goal.current_amount == Decimal("400")
        assert goal.progress == 40


# ---------------------------------------------------------------------------
# TestMemoryStores
# ---------------------------------------------------------------------------


class TestMemoryStores:
    def test_budget_reads_are_isolated_copies(self) -> None:
        store = MemoryBudgetStore()

        async def scenario() -> Any:
            await store.create(create_budget(OWNER, MARCH))
            loaded = await store.find_by_owner_and_period(OWNER, 3, 2026)
            loaded.categories[BudgetCategory.FOOD].spent = Decimal("1000")
            return await store.find_by_owner_and_period(OWNER, 3, 2026)

        assert asyncio.run(scenario()).categories[BudgetCategory.FOOD].spent == 0

    def test_ledger_lists_newest_first(self) -> None:
        store = MemoryLedgerStore()
        transactions = [_expense(day, day=day) for day in (3, 1, 2)]

        async def scenario() -> list[Transaction]:
            for transaction in transactions:
                await store.insert(transaction)
            return await store.list_by_owner(OWNER)

        assert [t.date.day for t in asyncio.run(scenario())] == [3, 2, 1]

    def test_goal_reads_are_isolated_copies(self) -> None:
        store = MemoryGoalStore()
        goal = _goal()

        async def scenario() -> Goal | None:
            await store.insert(goal)
            loaded = await store.get(goal.id)
            assert loaded is not None
            loaded.current_amount = Decimal("999")
            return await store.get(goal.id)

        loaded = asyncio.run(scenario())
        assert loaded is not None
        assert loaded.current_amount == Decimal("0")
