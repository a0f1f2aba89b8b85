"""
Report Models

Inputs and outputs of the two read operations the engine exposes:
the financial summary and the category spending breakdown.

These are read-only projections. Nothing here is ever persisted.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReportPeriodPreset(str, Enum):
    """Reporting periods offered to the user."""
    CURRENT_MONTH = "current_month"
    LAST_MONTH = "last_month"
    CURRENT_YEAR = "current_year"
    CUSTOM = "custom"


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class ReportQuery(BaseModel):
    """
    The input to both report operations.

    The range is inclusive on both ends. period_start <= period_end is
    the caller's responsibility; an inverted range simply matches nothing.
    """

    user_id: int
    period_start: date
    period_end: date

    @classmethod
    def for_preset(
        cls,
        user_id: int,
        preset: ReportPeriodPreset,
        today: Optional[date] = None,
        custom_start: Optional[date] = None,
        custom_end: Optional[date] = None,
    ) -> "ReportQuery":
        """
        Resolve a preset into concrete calendar dates.

        CUSTOM without both bounds falls back to today..today.
        """
        today = today or date.today()

        if preset == ReportPeriodPreset.CURRENT_MONTH:
            start, end = _month_bounds(today.year, today.month)
        elif preset == ReportPeriodPreset.LAST_MONTH:
            previous = today.replace(day=1) - timedelta(days=1)
            start, end = _month_bounds(previous.year, previous.month)
        elif preset == ReportPeriodPreset.CURRENT_YEAR:
            start, end = date(today.year, 1, 1), date(today.year, 12, 31)
        elif custom_start and custom_end:
            start, end = custom_start, custom_end
        else:
            start, end = today, today

        return cls(user_id=user_id, period_start=start, period_end=end)


class CategorySpending(BaseModel):
    """One row of the spending breakdown."""

    category_id: int
    category_name: str
    total_amount: Decimal
    transaction_count: int = Field(ge=1)
    percentage_of_total: float = Field(
        ge=0.0,
        le=100.0,
        description="Share of the period's total spending"
    )

    def to_response_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "total_amount": float(self.total_amount),
            "transaction_count": self.transaction_count,
            "percentage_of_total": self.percentage_of_total,
        }


class BudgetPerformance(BaseModel):
    """
    How much of a budget the reporting period consumed.

    remaining_amount goes negative when the budget is overspent.
    """

    budget_name: str
    budget_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    percentage_used: float = Field(ge=0.0)

    @property
    def is_overspent(self) -> bool:
        return self.remaining_amount < 0

    def to_response_dict(self) -> dict:
        return {
            "budget_name": self.budget_name,
            "budget_amount": float(self.budget_amount),
            "spent_amount": float(self.spent_amount),
            "remaining_amount": float(self.remaining_amount),
            "percentage_used": self.percentage_used,
        }


class FinancialSummary(BaseModel):
    """
    Point-in-time financial picture for one user.

    Income and expenses cover the reporting period. Investments and
    debts are current snapshots regardless of the period.
    """

    user_id: int
    period_start: date
    period_end: date

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")
    total_investments_value: Decimal = Decimal("0")
    total_debt_balance: Decimal = Decimal("0")

    budget_performance: list[BudgetPerformance] = Field(default_factory=list)

    @property
    def net_worth(self) -> Decimal:
        """Investments minus outstanding debt."""
        return self.total_investments_value - self.total_debt_balance

    @property
    def savings_rate(self) -> float:
        """Net income as a percentage of income, 0 when there is no income."""
        if self.total_income <= 0:
            return 0.0
        return float(self.net_income / self.total_income * 100)

    def to_response_dict(self) -> dict:
        """Convert to plain numbers for the transport layer."""
        return {
            "user_id": self.user_id,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "total_income": float(self.total_income),
            "total_expenses": float(self.total_expenses),
            "net_income": float(self.net_income),
            "total_investments_value": float(self.total_investments_value),
            "total_debt_balance": float(self.total_debt_balance),
            "budget_performance": [
                item.to_response_dict() for item in self.budget_performance
            ],
        }
