# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Keyword-based transaction categorization.

Deterministic rule matching, not inference: rules are checked in order, a rule
matches when any of its keywords is a substring of the lower-cased
description, and the first matching rule wins. Descriptions that match
nothing fall back to ``other``.
"""

from __future__ import annotations

from collections.abc import Sequence

from finance_planner.types import TransactionCategory

CategoryRule = tuple[TransactionCategory, frozenset[str]]

DEFAULT_RULES: tuple[CategoryRule, ...] = (
    (
        TransactionCategory.FOOD,
        frozenset({
            "pizza", "burger", "domino", "mcdonald", "kfc", "food", "restaurant", "cafe",
            "coffee", "tea", "meal", "dinner", "lunch", "breakfast", "groceries", "grocery",
            "vegetable", "fruit", "milk", "bread", "swiggy", "zomato",
        }),
    ),
    (
        TransactionCategory.TRANSPORT,
        frozenset({
            "uber", "ola", "ride", "taxi", "transport", "bus", "train", "metro", "fuel",
            "petrol", "diesel", "auto", "cab", "parking",
        }),
    ),
    (
        TransactionCategory.ENTERTAINMENT,
        frozenset({
            "netflix", "prime", "hotstar", "movie", "cinema", "theater", "game",
            "entertainment", "music", "spotify", "youtube", "streaming", "concert", "party",
        }),
    ),
    (
        TransactionCategory.SHOPPING,
        frozenset({
            "amazon", "flipkart", "myntra", "ajio", "shopping", "mall", "store", "market",
            "buy", "purchase", "clothes", "electronics", "fashion",
        }),
    ),
    (
        TransactionCategory.HEALTHCARE,
        frozenset({
            "medicine", "medical", "hospital", "doctor", "pharmacy", "health", "clinic",
            "treatment", "checkup", "apollo",
        }),
    ),
    (
        TransactionCategory.BILLS,
        frozenset({
            "bill", "electricity", "water", "gas", "mobile", "recharge", "internet", "wifi",
            "broadband", "utility",
        }),
    ),
    (
        TransactionCategory.EDUCATION,
        frozenset({
            "book", "course", "education", "school", "college", "tuition", "training",
            "learning", "study", "university",
        }),
    ),
    # Travel has no category of its own.
    (
        TransactionCategory.TRANSPORT,
        frozenset({"flight", "ticket", "hotel", "travel", "vacation", "trip", "holiday", "resort", "booking"}),
    ),
    (
        TransactionCategory.SAVINGS,
        frozenset({"mutual fund", "stock", "investment", "sip", "equity", "deposit"}),
    ),
    (
        TransactionCategory.INCOME,
        frozenset({"salary", "payroll", "payment received", "refund", "bonus"}),
    ),
)


def categorize(
    description: str,
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
) -> TransactionCategory:
    """Return the category of the first rule whose keyword occurs in ``description``."""
    text = description.lower()
    for category, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return category
    return TransactionCategory.OTHER
