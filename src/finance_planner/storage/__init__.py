# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from finance_planner.storage.file import FileBudgetStore, FileGoalStore, FileLedgerStore
from finance_planner.storage.interface import BudgetStore, GoalStore, LedgerStore
from finance_planner.storage.memory import MemoryBudgetStore, MemoryGoalStore, MemoryLedgerStore

__all__ = [
    "BudgetStore",
    "GoalStore",
    "LedgerStore",
    "MemoryBudgetStore",
    "MemoryGoalStore",
    "MemoryLedgerStore",
    "FileBudgetStore",
    "FileGoalStore",
    "FileLedgerStore",
]
