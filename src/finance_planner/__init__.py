# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
finance-planner: monthly budgets reconciled against a transaction ledger.

Quick start::

    import asyncio
    from datetime import datetime

    from finance_planner import FinancePlanner

    async def main() -> None:
        planner = FinancePlanner()
        await planner.create_smart_budget("alice", monthly_income=50_000, month=3, year=2026)
        await planner.add_transaction(
            "alice", 1200, "food", "expense", date=datetime(2026, 3, 2), description="groceries"
        )
        progress = await planner.budget_progress("alice", month=3, year=2026)

    asyncio.run(main())
"""

from finance_planner.alerts import (
    AlertSink,
    BudgetAlert,
    BudgetExceeded,
    BudgetWarning,
    LoggingAlertSink,
    MemoryAlertSink,
    dispatch_alert,
    evaluate_alert,
)
from finance_planner.budget import (
    create_budget,
    default_categories,
    parse_amount,
    parse_budget_category,
    recompute_totals,
    set_category_planned,
    set_planned_amounts,
)
from finance_planner.categorizer import DEFAULT_RULES, categorize
from finance_planner.config import AlertConfig, PlannerConfig
from finance_planner.errors import (
    BudgetNotFoundError,
    ConfigurationError,
    DuplicatePeriodError,
    FinancePlannerError,
    GoalClosedError,
    GoalNotFoundError,
    InvalidAmountError,
    InvalidDeadlineError,
    TransactionNotFoundError,
    UnknownCategoryError,
)
from finance_planner.goals import build_goal, contribute, goal_plan, summarize_goals
from finance_planner.insights import generate_insights, summarize_spending
from finance_planner.ledger import (
    build_transaction,
    filter_transactions,
    monthly_summary,
    paginate,
    period_stats,
    sum_expenses_by_category,
)
from finance_planner.planner import FinancePlanner
from finance_planner.progress import build_budget_progress
from finance_planner.reconciliation import ReconciliationEngine
from finance_planner.storage import (
    BudgetStore,
    FileBudgetStore,
    FileGoalStore,
    FileLedgerStore,
    GoalStore,
    LedgerStore,
    MemoryBudgetStore,
    MemoryGoalStore,
    MemoryLedgerStore,
)
from finance_planner.template import suggest_allocations, suggest_budget
from finance_planner.types import (
    Budget,
    BudgetCategory,
    BudgetProgress,
    CategoryAllocation,
    ExpenseTotal,
    Goal,
    GoalCategory,
    GoalPlan,
    GoalsOverview,
    GoalStatus,
    Period,
    PeriodStats,
    Transaction,
    TransactionCategory,
    TransactionFilter,
    TransactionPage,
)

__all__ = [
    # Core classes
    "FinancePlanner",
    "ReconciliationEngine",
    # Types
    "Budget",
    "BudgetCategory",
    "BudgetProgress",
    "CategoryAllocation",
    "ExpenseTotal",
    "Goal",
    "GoalCategory",
    "GoalPlan",
    "GoalsOverview",
    "GoalStatus",
    "Period",
    "PeriodStats",
    "Transaction",
    "TransactionCategory",
    "TransactionFilter",
    "TransactionPage",
    # Config
    "AlertConfig",
    "PlannerConfig",
    # Errors
    "FinancePlannerError",
    "DuplicatePeriodError",
    "UnknownCategoryError",
    "InvalidAmountError",
    "BudgetNotFoundError",
    "TransactionNotFoundError",
    "GoalNotFoundError",
    "GoalClosedError",
    "InvalidDeadlineError",
    "ConfigurationError",
    # Alerts
    "AlertSink",
    "BudgetAlert",
    "BudgetExceeded",
    "BudgetWarning",
    "LoggingAlertSink",
    "MemoryAlertSink",
    "dispatch_alert",
    "evaluate_alert",
    # Storage
    "LedgerStore",
    "BudgetStore",
    "MemoryLedgerStore",
    "MemoryBudgetStore",
    "FileLedgerStore",
    "FileBudgetStore",
    "GoalStore",
    "MemoryGoalStore",
    "FileGoalStore",
    # Utilities
    "create_budget",
    "default_categories",
    "parse_amount",
    "parse_budget_category",
    "recompute_totals",
    "set_category_planned",
    "set_planned_amounts",
    "suggest_allocations",
    "suggest_budget",
    "build_transaction",
    "filter_transactions",
    "paginate",
    "period_stats",
    "monthly_summary",
    "sum_expenses_by_category",
    "build_budget_progress",
    "categorize",
    "DEFAULT_RULES",
    "summarize_spending",
    "generate_insights",
    "build_goal",
    "contribute",
    "goal_plan",
    "summarize_goals",
]
