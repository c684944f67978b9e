# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for alert threshold evaluation, sinks and dispatch."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any

import pytest
from pydantic import ValidationError

from finance_planner.alerts import (
    AlertSink,
    BudgetExceeded,
    BudgetWarning,
    LoggingAlertSink,
    MemoryAlertSink,
    dispatch_alert,
    evaluate_alert,
)
from finance_planner.config import AlertConfig
from finance_planner.errors import ConfigurationError
from finance_planner.types import BudgetCategory, CategoryAllocation


def _allocation(planned: int | str, spent: int | str) -> CategoryAllocation:
    return CategoryAllocation(planned=Decimal(str(planned)), spent=Decimal(str(spent)))


class FailingSink:
    def __init__(self) -> None:
        self.calls = 0

    async def notify(self, owner: str, alert_kind: str, payload: dict[str, Any]) -> None:
        self.calls += 1
        raise RuntimeError("notification service unavailable")


# ---------------------------------------------------------------------------
# TestEvaluateAlert
# ---------------------------------------------------------------------------


class TestEvaluateAlert:
    def test_below_warning_threshold_has_no_alert(self) -> None:
        assert evaluate_alert(BudgetCategory.FOOD, _allocation(1000, 799)) is None

    def test_warning_at_eighty_percent(self) -> None:
        alert = evaluate_alert(BudgetCategory.FOOD, _allocation(1000, 800))
        assert isinstance(alert, BudgetWarning)
        assert alert.category is BudgetCategory.FOOD
        assert alert.utilization_percent == 80

    def test_warning_just_below_full(self) -> None:
        alert = evaluate_alert(BudgetCategory.FOOD, _allocation(1000, "999.99"))
        assert isinstance(alert, BudgetWarning)
        assert alert.utilization_percent == 100

    def test_exceeded_at_full_utilization(self) -> None:
        alert = evaluate_alert(BudgetCategory.FOOD, _allocation(1000, 1000))
        assert isinstance(alert, BudgetExceeded)
        assert alert.spent == Decimal("1000")
        assert alert.planned == Decimal("1000")

    def test_exceeded_above_full_utilization(self) -> None:
        alert = evaluate_alert(BudgetCategory.BILLS, _allocation(1000, 2500))
        assert isinstance(alert, BudgetExceeded)

    @pytest.mark.parametrize("spent", [0, 1, 1000, 10**9])
    def test_zero_planned_never_alerts(self, spent: int) -> None:
        assert evaluate_alert(BudgetCategory.FOOD, _allocation(0, spent)) is None

    def test_custom_thresholds(self) -> None:
        config = AlertConfig(warning_threshold=0.5, exceeded_threshold=0.9)
        assert isinstance(evaluate_alert(BudgetCategory.FOOD, _allocation(100, 50), config), BudgetWarning)
        assert isinstance(evaluate_alert(BudgetCategory.FOOD, _allocation(100, 90), config), BudgetExceeded)
        assert evaluate_alert(BudgetCategory.FOOD, _allocation(100, 49), config) is None


# ---------------------------------------------------------------------------
# TestAlertConfig
# ---------------------------------------------------------------------------


class TestAlertConfig:
    def test_defaults(self) -> None:
        config = AlertConfig()
        assert config.warning_threshold == 0.8
        assert config.exceeded_threshold == 1.0

    def test_exceeded_below_warning_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            AlertConfig(warning_threshold=0.9, exceeded_threshold=0.5)

    def test_warning_out_of_range_raises(self) -> None:
        with pytest.raises(ValidationError):
            AlertConfig(warning_threshold=0)


# ---------------------------------------------------------------------------
# TestSinks
# ---------------------------------------------------------------------------


class TestSinks:
    def test_builtin_sinks_satisfy_protocol(self) -> None:
        assert isinstance(MemoryAlertSink(), AlertSink)
        assert isinstance(LoggingAlertSink(), AlertSink)

    def test_memory_sink_collects_alerts(self) -> None:
        sink = MemoryAlertSink()
        alert = BudgetWarning(category=BudgetCategory.FOOD, utilization_percent=85)
        delivered = asyncio.run(dispatch_alert(sink, "user-001", alert))
        assert delivered is True
        assert len(sink.alerts) == 1
        received = sink.alerts[0]
        assert received.owner == "user-001"
        assert received.kind == "budget_warning"
        assert received.payload["category"] == "food"
        assert received.payload["utilization_percent"] == 85
        assert sink.for_owner("someone-else") == []
        sink.clear()
        assert sink.alerts == []

    def test_logging_sink_writes_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        alert = BudgetExceeded(
            category=BudgetCategory.SHOPPING, spent=Decimal("120"), planned=Decimal("100")
        )
        with caplog.at_level(logging.WARNING, logger="finance_planner.alerts"):
            asyncio.run(dispatch_alert(LoggingAlertSink(), "user-001", alert))
        assert any(record.getMessage() == "budget_exceeded" for record in caplog.records)

    def test_failing_sink_is_swallowed_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = FailingSink()
        alert = BudgetWarning(category=BudgetCategory.FOOD, utilization_percent=90)
        with caplog.at_level(logging.ERROR, logger="finance_planner.alerts"):
            delivered = asyncio.run(dispatch_alert(sink, "user-001", alert))
        assert delivered is False
        assert sink.calls == 1
        assert any(record.getMessage() == "budget_alert_delivery_failed" for record in caplog.records)
