"""
Budget Performance Evaluator

For every budget that is active at some point of the reporting period,
works out how much was spent against it in that period.

DESIGN DECISION: Two inclusion rules.
1. A budget is included when its window OVERLAPS the period; it does not
   have to contain it.
2. Spend is counted over the REPORTING PERIOD, not over the budget's own
   window.
"""

import asyncio
from datetime import date
from typing import Optional

import structlog

from src.config import get_settings
from src.models.records import Budget, TransactionKind
from src.models.reports import BudgetPerformance
from src.money import percentage, quantize_money, sum_money
from src.reports.base import ReportCalculator, gather_or_cancel
from src.services.storage.interface import RecordStoreInterface

logger = structlog.get_logger(__name__)


class BudgetPerformanceEvaluator(ReportCalculator):
    """
    Computes spent/remaining/percentage for each overlapping budget.

    Per-budget spend queries run concurrently, at most
    max_concurrent_queries at a time.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        query_timeout_seconds: Optional[float] = None,
        max_concurrent_queries: Optional[int] = None,
    ):
        super().__init__(store, query_timeout_seconds)
        if max_concurrent_queries is None:
            max_concurrent_queries = get_settings().reports.max_concurrent_budget_queries
        self._max_concurrent = max_concurrent_queries

    async def evaluate(
        self,
        user_id: int,
        period_start: date,
        period_end: date,
    ) -> list[BudgetPerformance]:
        budgets = await self._query(
            self._store.list_budgets(
                user_id,
                active_from=period_start,
                active_to=period_end,
            ),
            "Budget query",
        )
        budgets = [b for b in budgets if b.overlaps(period_start, period_end)]

        if not budgets:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def bounded(budget: Budget) -> BudgetPerformance:
            async with semaphore:
                return await self._evaluate_budget(
                    budget, user_id, period_start, period_end
                )

        results = await gather_or_cancel(*(bounded(b) for b in budgets))

        logger.debug(
            "budgets_evaluated",
            user_id=user_id,
            budgets=len(results),
            overspent=sum(1 for r in results if r.is_overspent),
        )
        return list(results)

    async def _evaluate_budget(
        self,
        budget: Budget,
        user_id: int,
        period_start: date,
        period_end: date,
    ) -> BudgetPerformance:
        # category_id None means all expense categories
        spending = await self._query(
            self._store.list_transactions(
                user_id,
                date_from=period_start,
                date_to=period_end,
                kind=TransactionKind.EXPENSE,
                category_id=budget.category_id,
            ),
            f"Spend query for budget '{budget.name}'",
        )

        spent = sum_money(txn.amount for txn in spending)
        budget_amount = quantize_money(budget.budget_amount)

        return BudgetPerformance(
            budget_name=budget.name,
            budget_amount=budget_amount,
            spent_amount=spent,
            remaining_amount=budget_amount - spent,
            percentage_used=percentage(spent, budget_amount),
        )
