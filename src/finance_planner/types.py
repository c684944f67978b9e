# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

# ─── Categories ───────────────────────────────────────────────────────────────


class TransactionCategory(str, Enum):
    """Every category a ledger transaction may carry."""

    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    EDUCATION = "education"
    SHOPPING = "shopping"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    SAVINGS = "savings"
    OTHER = "other"
    INCOME = "income"


class BudgetCategory(str, Enum):
    """
    The closed set of categories tracked by a budget.

    ``other`` and ``income`` are valid on transactions but are never budgeted.
    """

    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    EDUCATION = "education"
    SHOPPING = "shopping"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    SAVINGS = "savings"


BUDGET_CATEGORY_VALUES = frozenset(category.value for category in BudgetCategory)

# Cosmetic defaults shared with the UI layer.
CATEGORY_STYLES: dict[BudgetCategory, tuple[str, str]] = {
    BudgetCategory.FOOD: ("#FF6B6B", "🍕"),
    BudgetCategory.TRANSPORT: ("#4ECDC4", "🚗"),
    BudgetCategory.ENTERTAINMENT: ("#FFD93D", "🎬"),
    BudgetCategory.EDUCATION: ("#45B7D1", "📚"),
    BudgetCategory.SHOPPING: ("#6BCF7F", "🛍️"),
    BudgetCategory.BILLS: ("#C44569", "📄"),
    BudgetCategory.HEALTHCARE: ("#A78BFA", "🏥"),
    BudgetCategory.SAVINGS: ("#98D8AA", "💰"),
}

TransactionKind = Literal["income", "expense"]
PaymentMethod = Literal["cash", "card", "upi", "bank transfer"]
BudgetStatus = Literal["active", "inactive", "completed"]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ─── Period ───────────────────────────────────────────────────────────────────


class Period(BaseModel, frozen=True):
    """A (month, year) budgeting cycle."""

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)

    @classmethod
    def from_date(cls, value: datetime) -> Period:
        return cls(month=value.month, year=value.year)

    @classmethod
    def current(cls, today: datetime | None = None) -> Period:
        """The period containing ``today`` (default: now, UTC)."""
        return cls.from_date(today or _utcnow())

    @property
    def start(self) -> datetime:
        """First instant of the period (naive, calendar-local)."""
        return datetime(self.year, self.month, 1)

    @property
    def end(self) -> datetime:
        """First instant of the following period (exclusive bound)."""
        if self.month == 12:
            return datetime(self.year + 1, 1, 1)
        return datetime(self.year, self.month + 1, 1)

    def contains(self, value: datetime) -> bool:
        return value.year == self.year and value.month == self.month

    def previous(self) -> Period:
        if self.month == 1:
            return Period(month=12, year=self.year - 1)
        return Period(month=self.month - 1, year=self.year)

    def __str__(self) -> str:
        return f"{self.month:02d}/{self.year}"


# ─── Transaction ──────────────────────────────────────────────────────────────


class Transaction(BaseModel):
    """A single ledger entry. The reconciliation engine only ever reads these."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    owner: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    category: TransactionCategory
    kind: TransactionKind
    date: datetime = Field(default_factory=_utcnow)
    description: str = Field(default="", max_length=200)
    payment_method: PaymentMethod = "cash"
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    @property
    def period(self) -> Period:
        return Period.from_date(self.date)

    @property
    def is_expense(self) -> bool:
        return self.kind == "expense"


class ExpenseTotal(BaseModel, frozen=True):
    """One row of a grouped-by-category expense scan."""

    category: TransactionCategory
    amount: Decimal


class TransactionFilter(BaseModel):
    """Optional filter applied to transaction queries. All fields are AND-ed."""

    owner: Optional[str] = None
    category: Optional[TransactionCategory] = None
    kind: Optional[TransactionKind] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


class TransactionPage(BaseModel):
    """One page of a transaction listing, newest first."""

    items: list[Transaction]
    total: int
    total_pages: int
    page: int


# ─── Budget ───────────────────────────────────────────────────────────────────


class CategoryAllocation(BaseModel):
    """Planned vs spent for one category of one budget."""

    planned: Decimal = Field(default=Decimal("0"), ge=0)
    spent: Decimal = Field(default=Decimal("0"), ge=0)
    color: str = "#666666"
    icon: str = "💰"


class Budget(BaseModel):
    """
    One owner's budget for one period.

    ``total_planned`` and ``total_spent`` are derived on every access, so they
    always equal the sums over ``categories``.
    """

    owner: str = Field(..., min_length=1)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)
    categories: dict[BudgetCategory, CategoryAllocation]
    monthly_income: Decimal = Field(default=Decimal("0"), ge=0)
    budget_name: str = "Monthly Budget"
    status: BudgetStatus = "active"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("categories")
    @classmethod
    def categories_must_be_complete(
        cls, value: dict[BudgetCategory, CategoryAllocation]
    ) -> dict[BudgetCategory, CategoryAllocation]:
        missing = set(BudgetCategory) - set(value)
        if missing:
            names = sorted(category.value for category in missing)
            raise ValueError(f"budget is missing categories: {names}")
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_planned(self) -> Decimal:
        return sum((allocation.planned for allocation in self.categories.values()), Decimal("0"))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_spent(self) -> Decimal:
        return sum((allocation.spent for allocation in self.categories.values()), Decimal("0"))

    @property
    def period(self) -> Period:
        return Period(month=self.month, year=self.year)


# ─── Progress ─────────────────────────────────────────────────────────────────

ProgressStatus = Literal["normal", "warning", "exceeded"]


class CategoryProgress(BaseModel):
    """Planned vs spent view of one category, as shown on the budget page."""

    category: BudgetCategory
    planned: Decimal
    spent: Decimal
    remaining: Decimal
    utilization: int
    status: ProgressStatus
    color: str
    icon: str


class BudgetSummary(BaseModel):
    total_planned: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    monthly_income: Decimal
    savings: Decimal


class BudgetProgress(BaseModel):
    """Point-in-time progress report for one budget."""

    owner: str
    period: Period
    categories: list[CategoryProgress]
    summary: BudgetSummary


# ─── Ledger statistics ────────────────────────────────────────────────────────


class CategoryBreakdown(BaseModel):
    category: TransactionCategory
    total: Decimal
    count: int


class PeriodStats(BaseModel):
    """Income, expense and savings for one owner in one period."""

    period: Period
    income: Decimal
    expense: Decimal
    savings: Decimal
    savings_rate: float
    category_breakdown: list[CategoryBreakdown]
    total_transactions: int


class MonthlyTotals(BaseModel):
    period: Period
    income: Decimal
    expense: Decimal


# ─── Savings goals ────────────────────────────────────────────────────────────


class GoalCategory(str, Enum):
    EMERGENCY = "emergency"
    VACATION = "vacation"
    VEHICLE = "vehicle"
    HOME = "home"
    EDUCATION = "education"
    INVESTMENT = "investment"
    WEDDING = "wedding"
    GADGETS = "gadgets"
    OTHER = "other"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Goal(BaseModel):
    """
    A savings target with a deadline.

    ``progress`` is the saved share of the target as a whole percentage,
    capped at 100. It is derived on every access.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    owner: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    target_amount: Decimal = Field(..., ge=1)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: datetime
    category: GoalCategory = GoalCategory.OTHER
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("goal name must not be blank")
        return stripped

    @computed_field  # type: ignore[prop-decorator]
    @property
    def progress(self) -> int:
        ratio = self.current_amount / self.target_amount * 100
        return min(int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP)), 100)

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self.target_amount - self.current_amount)


class GoalsOverview(BaseModel):
    """Totals across all of one owner's goals, as shown on the goals page."""

    goals: list[Goal]
    total_saved: Decimal
    total_target: Decimal
    overall_progress: int


GoalFeasibility = Literal["high", "medium", "low"]


class GoalPlan(BaseModel):
    """Monthly saving needed to reach a target, with canned advice."""

    monthly_savings_needed: Decimal
    timeline_months: int
    feasibility: GoalFeasibility
    suggestions: list[str]
    achievement_probability: int
