# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, model_validator

from finance_planner.errors import ConfigurationError


class AlertConfig(BaseModel, frozen=True):
    """
    Static utilization thresholds for budget alerts.

    Attributes:
        warning_threshold: Utilization (spent / planned) at which a
            ``budget_warning`` alert fires.
        exceeded_threshold: Utilization at which a ``budget_exceeded`` alert
            fires instead of a warning.
    """

    warning_threshold: Annotated[float, Field(gt=0, le=1)] = 0.8
    exceeded_threshold: Annotated[float, Field(gt=0)] = 1.0

    @model_validator(mode="after")
    def thresholds_must_be_ordered(self) -> AlertConfig:
        if self.exceeded_threshold < self.warning_threshold:
            raise ConfigurationError(
                f"exceeded_threshold ({self.exceeded_threshold}) must not be below "
                f"warning_threshold ({self.warning_threshold})."
            )
        return self


class PlannerConfig(BaseModel, frozen=True):
    """
    Top-level configuration for the FinancePlanner.

    Example::

        config = PlannerConfig(alerts=AlertConfig(warning_threshold=0.75))
        planner = FinancePlanner(config=config)

    Attributes:
        alerts: Threshold settings for the alert evaluator.
        default_page_size: Page size used by transaction listings when the
            caller does not pass one.
        recent_limit: Number of transactions returned by
            ``recent_transactions`` by default.
    """

    alerts: AlertConfig = Field(default_factory=AlertConfig)
    default_page_size: Annotated[int, Field(gt=0)] = 10
    recent_limit: Annotated[int, Field(gt=0)] = 5
