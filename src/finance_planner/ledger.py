# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from finance_planner.errors import InvalidAmountError
from finance_planner.types import (
    CategoryBreakdown,
    ExpenseTotal,
    MonthlyTotals,
    Period,
    PeriodStats,
    Transaction,
    TransactionCategory,
    TransactionFilter,
    TransactionKind,
    TransactionPage,
)


def build_transaction(
    owner: str,
    amount: Any,
    category: str | TransactionCategory,
    kind: TransactionKind | str,
    date: datetime | None = None,
    description: str = "",
    payment_method: str = "cash",
) -> Transaction:
    """
    Build a validated Transaction with a fresh id.

    Category and kind are case-insensitive. Raises InvalidAmountError if the
    amount is not a positive number; other bad fields raise pydantic's
    ValidationError.
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(amount, "must be numeric")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except ArithmeticError:
        raise InvalidAmountError(amount, "must be numeric") from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(amount, "transaction amount must be positive")

    fields: dict[str, Any] = {
        "owner": owner,
        "amount": value,
        "category": category.lower() if isinstance(category, str) else category,
        "kind": kind.lower() if isinstance(kind, str) else kind,
        "description": description or "",
        "payment_method": payment_method,
    }
    if date is not None:
        fields["date"] = date
    return Transaction.model_validate(fields)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filter_transactions(
    transactions: Iterable[Transaction],
    transaction_filter: TransactionFilter | None,
) -> list[Transaction]:
    """
    Apply an optional TransactionFilter to a sequence of transactions.
    All filter fields are AND-ed together.
    Returns a new list; the input is not modified.
    """
    if transaction_filter is None:
        return list(transactions)

    results: list[Transaction] = []
    for transaction in transactions:
        if transaction_filter.owner is not None and transaction.owner != transaction_filter.owner:
            continue
        if (
            transaction_filter.category is not None
            and transaction.category != transaction_filter.category
        ):
            continue
        if transaction_filter.kind is not None and transaction.kind != transaction_filter.kind:
            continue

        tx_time = _as_utc(transaction.date)
        if transaction_filter.since is not None and tx_time < _as_utc(transaction_filter.since):
            continue
        if transaction_filter.until is not None and tx_time > _as_utc(transaction_filter.until):
            continue

        if (
            transaction_filter.min_amount is not None
            and transaction.amount < transaction_filter.min_amount
        ):
            continue
        if (
            transaction_filter.max_amount is not None
            and transaction.amount > transaction_filter.max_amount
        ):
            continue

        results.append(transaction)

    return results


def newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(
        transactions,
        key=lambda transaction: (_as_utc(transaction.date), _as_utc(transaction.created_at)),
        reverse=True,
    )


def paginate(transactions: Iterable[Transaction], page: int = 1, limit: int = 10) -> TransactionPage:
    """Slice a newest-first listing into one page. Pages are 1-based."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    ordered = newest_first(transactions)
    start = (page - 1) * limit
    return TransactionPage(
        items=ordered[start : start + limit],
        total=len(ordered),
        total_pages=math.ceil(len(ordered) / limit),
        page=page,
    )


def sum_expenses_by_category(
    transactions: Iterable[Transaction],
    owner: str,
    period: Period,
) -> list[ExpenseTotal]:
    """
    Group ``owner``'s expense transactions dated in ``period`` by category.

    This is the ledger-side aggregate the reconciliation engine rebuilds
    budgets from. Income transactions are never counted.
    """
    totals: dict[TransactionCategory, Decimal] = defaultdict(Decimal)
    for transaction in transactions:
        if transaction.owner != owner or not transaction.is_expense:
            continue
        if not period.contains(transaction.date):
            continue
        totals[transaction.category] += transaction.amount
    return [ExpenseTotal(category=category, amount=amount) for category, amount in totals.items()]


def period_stats(transactions: Iterable[Transaction], period: Period) -> PeriodStats:
    """Income, expense, savings rate and per-category breakdown for ``period``."""
    income = Decimal("0")
    expense = Decimal("0")
    count = 0
    by_category: dict[TransactionCategory, list[Decimal]] = defaultdict(list)

    for transaction in transactions:
        if not period.contains(transaction.date):
            continue
        count += 1
        if transaction.is_expense:
            expense += transaction.amount
            by_category[transaction.category].append(transaction.amount)
        else:
            income += transaction.amount

    savings = income - expense
    breakdown = sorted(
        (
            CategoryBreakdown(category=category, total=sum(amounts, Decimal("0")), count=len(amounts))
            for category, amounts in by_category.items()
        ),
        key=lambda row: row.total,
        reverse=True,
    )
    return PeriodStats(
        period=period,
        income=income,
        expense=expense,
        savings=savings,
        savings_rate=float(savings / income * 100) if income > 0 else 0.0,
        category_breakdown=breakdown,
        total_transactions=count,
    )


def monthly_summary(
    transactions: Iterable[Transaction],
    months: int = 6,
    today: datetime | None = None,
) -> list[MonthlyTotals]:
    """
    Income and expense per period for the last ``months`` periods before the
    current one, plus the current one, oldest first. Empty periods are omitted.
    """
    if months < 0:
        raise ValueError(f"months must be >= 0, got {months}")
    current = Period.current(today)
    window = {current}
    cursor = current
    for _ in range(months):
        cursor = cursor.previous()
        window.add(cursor)

    income: dict[Period, Decimal] = defaultdict(Decimal)
    expense: dict[Period, Decimal] = defaultdict(Decimal)
    for transaction in transactions:
        period = transaction.period
        if period not in window:
            continue
        if transaction.is_expense:
            expense[period] += transaction.amount
        else:
            income[period] += transaction.amount

    seen = sorted(set(income) | set(expense), key=lambda period: (period.year, period.month))
    return [
        MonthlyTotals(period=period, income=income[period], expense=expense[period])
        for period in seen
    ]
