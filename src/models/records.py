"""
Persisted Finance Records

These models mirror the rows kept by the surrounding application:
transactions, their categories, budgets, investments and debts.
The reporting engine only ever READS them.

DESIGN DECISION: Money and quantities are Decimal end to end.
Stored values are decimal text; parsing them into floats would let
cent-level drift accumulate when many rows are summed.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of money flow. Categories carry the same classification."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """
    Descriptive label on a budget.

    NOTE: Never used to derive dates. A budget's lifetime is always
    its explicit [start_date, end_date] window.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class InvestmentType(str, Enum):
    STOCK = "stock"
    MUTUAL_FUND = "mutual_fund"
    CRYPTOCURRENCY = "cryptocurrency"
    BOND = "bond"
    ETF = "etf"
    OTHER = "other"


class DebtType(str, Enum):
    LOAN = "loan"
    CREDIT_CARD = "credit_card"
    MORTGAGE = "mortgage"
    PERSONAL_LOAN = "personal_loan"
    OTHER = "other"


# =============================================================================
# RECORDS
# =============================================================================

class TransactionCategory(BaseModel):
    """A user-defined bucket for transactions."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    name: str = Field(..., min_length=1, max_length=200)
    kind: TransactionKind
    user_id: int
    created_at: datetime = Field(default_factory=utcnow)


class Transaction(BaseModel):
    """
    A single income or expense entry.

    CRITICAL: category_id must reference a category of the same user.
    That is checked when the transaction is written, not when it is reported.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    user_id: int
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Positive amount; direction comes from kind"
    )
    description: str = Field(..., min_length=1, max_length=500)
    kind: TransactionKind
    category_id: int
    transaction_date: date
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Budget(BaseModel):
    """
    A spending limit over an inclusive date window.

    A budget without category_id is an "overall" budget covering
    every expense category.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    user_id: int
    name: str = Field(..., min_length=1, max_length=200)
    category_id: Optional[int] = None
    budget_amount: Decimal = Field(..., gt=0, decimal_places=2)
    period_type: BudgetPeriod
    start_date: date
    end_date: date
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_overall(self) -> bool:
        return self.category_id is None

    def overlaps(self, period_start: date, period_end: date) -> bool:
        """True if the budget window shares at least one day with the period."""
        return self.start_date <= period_end and self.end_date >= period_start


class Investment(BaseModel):
    """
    A held position.

    current_value is the value of the WHOLE position, not per unit.
    quantity keeps 8 fractional digits for crypto and fractional shares.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    user_id: int
    name: str = Field(..., min_length=1, max_length=200)
    type: InvestmentType
    quantity: Decimal = Field(..., gt=0, decimal_places=8)
    purchase_price: Decimal = Field(..., gt=0, decimal_places=2)
    current_value: Decimal = Field(..., ge=0, decimal_places=2)
    purchase_date: date
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Debt(BaseModel):
    """An outstanding loan or credit line."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    user_id: int
    lender: str = Field(..., min_length=1, max_length=200)
    debt_type: DebtType
    original_amount: Decimal = Field(..., gt=0, decimal_places=2)
    current_balance: Decimal = Field(..., ge=0, decimal_places=2)
    interest_rate: Decimal = Field(
        ...,
        ge=0,
        decimal_places=4,
        description="Fraction, e.g. 0.0525 for 5.25%"
    )
    minimum_payment: Decimal = Field(..., ge=0, decimal_places=2)
    due_date: Optional[date] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# =============================================================================
# SPARSE UPDATES
# =============================================================================

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordUpdate(BaseModel):
    """
    Base for partial updates.

    Only fields the caller actually provided are applied, so an explicit
    None (e.g. clearing a budget's category) is different from "not given".
    """

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}

    def apply_to(self, record: RecordT) -> RecordT:
        """Return a re-validated copy of record with the provided fields replaced."""
        data = record.model_dump()
        data.update(self.changes())
        if "updated_at" in data:
            data["updated_at"] = utcnow()
        return type(record).model_validate(data)


class TransactionUpdate(RecordUpdate):
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    description: Optional[str] = Field(default=None, min_length=1)
    kind: Optional[TransactionKind] = None
    category_id: Optional[int] = None
    transaction_date: Optional[date] = None


class BudgetUpdate(RecordUpdate):
    name: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[int] = None
    budget_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    period_type: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class InvestmentUpdate(RecordUpdate):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[InvestmentType] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0, decimal_places=8)
    purchase_price: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    current_value: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    purchase_date: Optional[date] = None


class DebtUpdate(RecordUpdate):
    lender: Optional[str] = Field(default=None, min_length=1)
    debt_type: Optional[DebtType] = None
    original_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    current_balance: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    interest_rate: Optional[Decimal] = Field(default=None, ge=0, decimal_places=4)
    minimum_payment: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    due_date: Optional[date] = None
