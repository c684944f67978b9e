# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
JSON Lines file storage backends.

Each store keeps one JSON object per line (NDJSON). Inserts append to the
file; updates and deletes rewrite it through a temporary file that is then
renamed over the original, so a crashed write never leaves a half-written
store behind.

Reading always parses the entire file from disk so that the in-process view
stays consistent with anything written by other processes. Writes are
serialized within one process only; run a single writer per file.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TypeVar

import aiofiles
import aiofiles.os
from pydantic import BaseModel, ValidationError

from finance_planner.errors import DuplicatePeriodError
from finance_planner.ledger import newest_first, sum_expenses_by_category
from finance_planner.storage.interface import BudgetStore, GoalStore, LedgerStore
from finance_planner.types import Budget, ExpenseTotal, Goal, Period, Transaction

logger = logging.getLogger("finance_planner.storage")

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _read_lines(file_path: Path, model: type[ModelT]) -> list[ModelT]:
    if not file_path.exists():
        return []

    records: list[ModelT] = []
    async with aiofiles.open(file_path, mode="r", encoding="utf-8") as file_handle:
        line_number = 0
        async for line in file_handle:
            line_number += 1
            stripped = line.strip()
            if not stripped:
                continue
            try:
                records.append(model.model_validate(json.loads(stripped)))
            except (json.JSONDecodeError, ValidationError):
                logger.warning(
                    "storage_line_skipped",
                    extra={"file": str(file_path), "line": line_number},
                )
    return records


def _dump(record: BaseModel) -> str:
    return json.dumps(record.model_dump(mode="json"), ensure_ascii=False) + "\n"


async def _append_line(file_path: Path, record: BaseModel) -> None:
    async with aiofiles.open(file_path, mode="a", encoding="utf-8") as file_handle:
        await file_handle.write(_dump(record))


async def _rewrite(file_path: Path, records: Iterable[BaseModel]) -> None:
    temp_path = file_path.with_name(file_path.name + ".tmp")
    async with aiofiles.open(temp_path, mode="w", encoding="utf-8") as file_handle:
        for record in records:
            await file_handle.write(_dump(record))
    await aiofiles.os.replace(temp_path, file_path)


class FileLedgerStore(LedgerStore):
    """
    Persistent transaction ledger stored as NDJSON.

    Parameters
    ----------
    file_path:
        Path to the NDJSON file. It is created on the first insert.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._write_lock = asyncio.Lock()

    async def _all(self) -> list[Transaction]:
        return await _read_lines(self._file_path, Transaction)

    async def get(self, transaction_id: str) -> Transaction | None:
        for transaction in await self._all():
            if transaction.id == transaction_id:
                return transaction
        return None

    async def insert(self, transaction: Transaction) -> None:
        async with self._write_lock:
            if await self.get(transaction.id) is not None:
                raise KeyError(f"Transaction {transaction.id!r} already exists")
            await _append_line(self._file_path, transaction)

    async def update(self, transaction: Transaction) -> None:
        async with self._write_lock:
            records = await self._all()
            for index, existing in enumerate(records):
                if existing.id == transaction.id:
                    records[index] = transaction
                    break
            else:
                raise KeyError(f"Transaction {transaction.id!r} does not exist")
            await _rewrite(self._file_path, records)

    async def delete(self, transaction_id: str) -> bool:
        async with self._write_lock:
            records = await self._all()
            kept = [record for record in records if record.id != transaction_id]
            if len(kept) == len(records):
                return False
            await _rewrite(self._file_path, kept)
            return True

    async def list_by_owner(self, owner: str) -> list[Transaction]:
        return newest_first(t for t in await self._all() if t.owner == owner)

    async def find_expenses_by_owner_and_period(
        self, owner: str, month: int, year: int
    ) -> list[ExpenseTotal]:
        return sum_expenses_by_category(await self._all(), owner, Period(month=month, year=year))


class FileBudgetStore(BudgetStore):
    """
    Persistent budget store stored as NDJSON, one budget per line.

    Parameters
    ----------
    file_path:
        Path to the NDJSON file. It is created on the first write.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._write_lock = asyncio.Lock()

    async def _all(self) -> list[Budget]:
        return await _read_lines(self._file_path, Budget)

    async def find_by_owner_and_period(self, owner: str, month: int, year: int) -> Budget | None:
        for budget in await self._all():
            if (budget.owner, budget.month, budget.year) == (owner, month, year):
                return budget
        return None

    async def create(self, budget: Budget) -> None:
        async with self._write_lock:
            existing = await self.find_by_owner_and_period(budget.owner, budget.month, budget.year)
            if existing is not None:
                raise DuplicatePeriodError(budget.owner, budget.month, budget.year)
            await _append_line(self._file_path, budget)

    async def save(self, budget: Budget) -> None:
        key = (budget.owner, budget.month, budget.year)
        async with self._write_lock:
            records = [
                record
                for record in await self._all()
                if (record.owner, record.month, record.year) != key
            ]
            records.append(budget)
            await _rewrite(self._file_path, records)

    async def list_by_owner(self, owner: str) -> list[Budget]:
        owned = [budget for budget in await self._all() if budget.owner == owner]
        return sorted(owned, key=lambda budget: (budget.year, budget.month))


class FileGoalStore(GoalStore):
    """
    Persistent goal store stored as NDJSON, one goal per line.

    Parameters
    ----------
    file_path:
        Path to the NDJSON file. It is created on the first insert.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._write_lock = asyncio.Lock()

    async def _all(self) -> list[Goal]:
        return await _read_lines(self._file_path, Goal)

    async def get(self, goal_id: str) -> Goal | None:
        for goal in await self._all():
            if goal.id == goal_id:
                return goal
        return None

    async def insert(self, goal: Goal) -> None:
        async with self._write_lock:
            if await self.get(goal.id) is not None:
                raise KeyError(f"Goal {goal.id!r} already exists")
            await _append_line(self._file_path, goal)

    async def save(self, goal: Goal) -> None:
        async with self._write_lock:
            records = await self._all()
            for index, existing in enumerate(records):
                if existing.id == goal.id:
                    records[index] = goal
                    break
            else:
                raise KeyError(f"Goal {goal.id!r} does not exist")
            await _rewrite(self._file_path, records)

    async def delete(self, goal_id: str) -> bool:
        async with self._write_lock:
            records = await self._all()
            kept = [record for record in records if record.id != goal_id]
            if len(kept) == len(records):
                return False
            await _rewrite(self._file_path, kept)
            return True

    async def list_by_owner(self, owner: str) -> list[Goal]:
        owned = [goal for goal in await self._all() if goal.owner == owner]
        return sorted(owned, key=lambda goal: goal.created_at, reverse=True)
