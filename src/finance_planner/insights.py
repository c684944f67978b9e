# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Canned spending insights.

Static rules over a spending summary. No forecasting or statistical
modeling is performed.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_planner.types import Transaction, TransactionCategory

# Savings rate (percent of income) below which the advice message is added.
MIN_SAVINGS_RATE = Decimal("10")

EMPTY_LEDGER_MESSAGE = "Add some transactions to get insights!"
NO_INSIGHT_MESSAGE = "Keep tracking your expenses for better insights!"


class SpendingSummary(BaseModel):
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    categories: dict[TransactionCategory, Decimal] = Field(default_factory=dict)
    transaction_count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def top_category(self) -> tuple[TransactionCategory, Decimal] | None:
        if not self.categories:
            return None
        return max(self.categories.items(), key=lambda item: item[1])


def summarize_spending(transactions: Iterable[Transaction]) -> SpendingSummary:
    income = Decimal("0")
    expense = Decimal("0")
    count = 0
    categories: dict[TransactionCategory, Decimal] = defaultdict(Decimal)
    for transaction in transactions:
        count += 1
        if transaction.is_expense:
            expense += transaction.amount
            categories[transaction.category] += transaction.amount
        else:
            income += transaction.amount
    return SpendingSummary(
        total_income=income,
        total_expense=expense,
        categories=dict(categories),
        transaction_count=count,
    )


def _money(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"


def generate_insights(summary: SpendingSummary) -> list[str]:
    """
    Turn a summary into short recommendation messages.

    Covers the income/expense balance, the top spending category and a
    savings-rate nudge when less than 10% of income is being saved.
    """
    if summary.transaction_count == 0:
        return [EMPTY_LEDGER_MESSAGE]

    insights: list[str] = []
    balance = summary.balance
    if balance < 0:
        insights.append(
            f"You're spending {_money(-balance)} more than your income. Consider reducing expenses."
        )
    elif balance > 0:
        insights.append(f"Great! You're saving {_money(balance)} this month.")

    top = summary.top_category
    if top is not None:
        category, amount = top
        insights.append(f"Your highest spending is on {category.value} ({_money(amount)}).")

    if summary.total_income > 0:
        savings_rate = balance / summary.total_income * 100
        if savings_rate < MIN_SAVINGS_RATE:
            insights.append(
                "Try to save at least 10% of your income. "
                f"Current savings rate: {savings_rate:.1f}%"
            )

    return insights or [NO_INSIGHT_MESSAGE]
