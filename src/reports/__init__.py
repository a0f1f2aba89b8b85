"""Financial aggregation and reporting package."""

from src.reports.base import ReportCalculator, gather_or_cancel
from src.reports.budgets import BudgetPerformanceEvaluator
from src.reports.spending import CategorySpendingAggregator, top_spending_categories
from src.reports.summary import FinancialSummaryComposer

__all__ = [
    "BudgetPerformanceEvaluator",
    "CategorySpendingAggregator",
    "FinancialSummaryComposer",
    "ReportCalculator",
    "gather_or_cancel",
    "top_spending_categories",
]
