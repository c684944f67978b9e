# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for finance-planner tests."""

from __future__ import annotations

import pytest

from finance_planner.alerts import MemoryAlertSink
from finance_planner.planner import FinancePlanner
from finance_planner.reconciliation import ReconciliationEngine
from finance_planner.storage.memory import MemoryBudgetStore, MemoryLedgerStore
from finance_planner.types import Period

OWNER = "user-001"
MONTH = 3
YEAR = 2026


@pytest.fixture
def period() -> Period:
    return Period(month=MONTH, year=YEAR)


@pytest.fixture
def ledger() -> MemoryLedgerStore:
    return MemoryLedgerStore()


@pytest.fixture
def budgets() -> MemoryBudgetStore:
    return MemoryBudgetStore()


@pytest.fixture
def alert_sink() -> MemoryAlertSink:
    return MemoryAlertSink()


@pytest.fixture
def engine(
    ledger: MemoryLedgerStore, budgets: MemoryBudgetStore, alert_sink: MemoryAlertSink
) -> ReconciliationEngine:
    return ReconciliationEngine(ledger=ledger, budgets=budgets, alert_sink=alert_sink)


@pytest.fixture
def planner(
    ledger: MemoryLedgerStore, budgets: MemoryBudgetStore, alert_sink: MemoryAlertSink
) -> FinancePlanner:
    """A planner over fresh in-memory stores with a collecting alert sink."""
    return FinancePlanner(ledger=ledger, budgets=budgets, alert_sink=alert_sink)
