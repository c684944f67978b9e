# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Budget alerts for the finance planner.

Provides static threshold-based alerts when a category's spending reaches a
fixed fraction of its planned amount. Alerts are handed to a pluggable sink.

Delivery is fire-and-forget: a sink that raises never fails the ledger write
that triggered the alert.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from finance_planner.config import AlertConfig
from finance_planner.types import BudgetCategory, CategoryAllocation

logger = logging.getLogger("finance_planner.alerts")


# ---------------------------------------------------------------------------
# Alert models
# ---------------------------------------------------------------------------

AlertKind = Literal["budget_warning", "budget_exceeded"]


class BudgetExceeded(BaseModel, frozen=True):
    """Spending has reached or passed the planned amount."""

    kind: Literal["budget_exceeded"] = "budget_exceeded"
    category: BudgetCategory
    spent: Decimal
    planned: Decimal


class BudgetWarning(BaseModel, frozen=True):
    """Spending is close to, but below, the planned amount."""

    kind: Literal["budget_warning"] = "budget_warning"
    category: BudgetCategory
    utilization_percent: int = Field(..., ge=0)


BudgetAlert = BudgetExceeded | BudgetWarning


def utilization(allocation: CategoryAllocation) -> Decimal | None:
    """``spent / planned``, or None when nothing is planned."""
    if allocation.planned == 0:
        return None
    return allocation.spent / allocation.planned


def evaluate_alert(
    category: BudgetCategory,
    allocation: CategoryAllocation,
    config: AlertConfig | None = None,
) -> BudgetAlert | None:
    """
    Check one category against the static thresholds.

    Returns None when planned is 0 (no alert regardless of spent) or when
    utilization is below the warning threshold.
    """
    config = config or AlertConfig()
    ratio = utilization(allocation)
    if ratio is None:
        return None

    if ratio >= Decimal(str(config.exceeded_threshold)):
        return BudgetExceeded(category=category, spent=allocation.spent, planned=allocation.planned)
    if ratio >= Decimal(str(config.warning_threshold)):
        percent = int((ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return BudgetWarning(category=category, utilization_percent=percent)
    return None


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


@runtime_checkable
class AlertSink(Protocol):
    """Receiver for threshold-breach notifications. Injected for testability."""

    async def notify(self, owner: str, alert_kind: AlertKind, payload: dict[str, Any]) -> None:
        """Deliver one alert. May raise; the caller logs and swallows the error."""
        ...


class LoggingAlertSink:
    """Default sink: writes each alert to the ``finance_planner.alerts`` logger."""

    def __init__(self, level: int = logging.WARNING) -> None:
        self._level = level

    async def notify(self, owner: str, alert_kind: AlertKind, payload: dict[str, Any]) -> None:
        logger.log(
            self._level,
            alert_kind,
            extra={"owner": owner, "alert": payload},
        )


class DeliveredAlert(BaseModel, frozen=True):
    """An alert as received by MemoryAlertSink."""

    owner: str
    kind: AlertKind
    payload: dict[str, Any]
    received_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))


class MemoryAlertSink:
    """
    In-process sink that keeps every alert it receives.

    Useful for tests and for surfacing alerts on the next page render.
    """

    def __init__(self) -> None:
        self._alerts: list[DeliveredAlert] = []

    async def notify(self, owner: str, alert_kind: AlertKind, payload: dict[str, Any]) -> None:
        self._alerts.append(DeliveredAlert(owner=owner, kind=alert_kind, payload=payload))

    @property
    def alerts(self) -> list[DeliveredAlert]:
        return list(self._alerts)

    def for_owner(self, owner: str) -> list[DeliveredAlert]:
        return [alert for alert in self._alerts if alert.owner == owner]

    def clear(self) -> None:
        self._alerts.clear()


async def dispatch_alert(sink: AlertSink, owner: str, alert: BudgetAlert) -> bool:
    """
    Send ``alert`` to ``sink``.

    Returns True when the sink accepted it. Any exception raised by the sink is
    logged and swallowed.
    """
    payload = alert.model_dump(mode="json")
    try:
        await sink.notify(owner, alert.kind, payload)
    except Exception:
        logger.exception(
            "budget_alert_delivery_failed",
            extra={"owner": owner, "alert_kind": alert.kind, "category": alert.category.value},
        )
        return False
    return True
