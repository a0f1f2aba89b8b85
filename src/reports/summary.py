"""
Financial Summary Composer

Builds the point-in-time summary from four independent computations:
period income/expense totals, investment value, debt balance and
budget performance. They run concurrently; if any of them fails the
whole summary fails. There are no partial summaries.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from src.models.records import TransactionKind
from src.models.reports import FinancialSummary, ReportQuery
from src.money import ZERO, quantize_money, sum_money
from src.reports.base import ReportCalculator, gather_or_cancel
from src.reports.budgets import BudgetPerformanceEvaluator
from src.services.storage.interface import RecordStoreInterface

logger = structlog.get_logger(__name__)


class FinancialSummaryComposer(ReportCalculator):
    """
    Orchestrates the summary calculations.

    Income and expenses are limited to the reporting period.
    Investments and debts are current snapshots and ignore it.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        budget_evaluator: Optional[BudgetPerformanceEvaluator] = None,
        query_timeout_seconds: Optional[float] = None,
    ):
        super().__init__(store, query_timeout_seconds)
        self._budget_evaluator = budget_evaluator or BudgetPerformanceEvaluator(
            store, query_timeout_seconds=self._timeout
        )

    async def compose(self, query: ReportQuery) -> FinancialSummary:
        (income, expenses), investments_value, debt_balance, budgets = (
            await gather_or_cancel(
                self._transaction_totals(
                    query.user_id, query.period_start, query.period_end
                ),
                self._investments_value(query.user_id),
                self._debt_balance(query.user_id),
                self._budget_evaluator.evaluate(
                    query.user_id, query.period_start, query.period_end
                ),
            )
        )

        summary = FinancialSummary(
            user_id=query.user_id,
            period_start=query.period_start,
            period_end=query.period_end,
            total_income=income,
            total_expenses=expenses,
            net_income=income - expenses,
            total_investments_value=investments_value,
            total_debt_balance=debt_balance,
            budget_performance=budgets,
        )

        logger.debug(
            "financial_summary_composed",
            user_id=query.user_id,
            net_income=str(summary.net_income),
            budgets=len(budgets),
        )
        return summary

    async def _transaction_totals(
        self,
        user_id: int,
        period_start: date,
        period_end: date,
    ) -> tuple[Decimal, Decimal]:
        """Sum the period's transactions by their stored kind."""
        transactions = await self._query(
            self._store.list_transactions(
                user_id, date_from=period_start, date_to=period_end
            ),
            "Transaction query",
        )

        totals = {TransactionKind.INCOME: ZERO, TransactionKind.EXPENSE: ZERO}
        for txn in transactions:
            totals[txn.kind] += txn.amount

        return (
            quantize_money(totals[TransactionKind.INCOME]),
            quantize_money(totals[TransactionKind.EXPENSE]),
        )

    async def _investments_value(self, user_id: int) -> Decimal:
        investments = await self._query(
            self._store.list_investments(user_id), "Investment query"
        )
        return sum_money(i.current_value for i in investments)

    async def _debt_balance(self, user_id: int) -> Decimal:
        debts = await self._query(self._store.list_debts(user_id), "Debt query")
        return sum_money(d.current_balance for d in debts)
