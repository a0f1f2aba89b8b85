"""
Category Spending Aggregator

Breaks a period's expenses down by category: how much, how many
transactions, and what share of the period's spending each category took.
"""

from datetime import date
from decimal import Decimal

import structlog

from src.models.records import TransactionKind
from src.models.reports import CategorySpending
from src.money import ZERO, percentage, quantize_money
from src.reports.base import ReportCalculator, gather_or_cancel

logger = structlog.get_logger(__name__)


class CategorySpendingAggregator(ReportCalculator):
    """
    Groups a user's expense transactions by category.

    GUARANTEES:
    - Only expense transactions inside [period_start, period_end] count
    - Only categories with at least one such transaction are listed
    - Percentages of a non-empty result add up to 100
    """

    async def aggregate(
        self,
        user_id: int,
        period_start: date,
        period_end: date,
    ) -> list[CategorySpending]:
        expenses, categories = await gather_or_cancel(
            self._query(
                self._store.list_transactions(
                    user_id,
                    date_from=period_start,
                    date_to=period_end,
                    kind=TransactionKind.EXPENSE,
                ),
                "Expense transaction query",
            ),
            self._query(
                self._store.list_categories(user_id),
                "Category query",
            ),
        )

        names = {category.id: category.name for category in categories}

        totals: dict[int, Decimal] = {}
        counts: dict[int, int] = {}
        for txn in expenses:
            # Transactions whose category can't be resolved are not reported
            if txn.category_id not in names:
                continue
            totals[txn.category_id] = totals.get(txn.category_id, ZERO) + txn.amount
            counts[txn.category_id] = counts.get(txn.category_id, 0) + 1

        grand_total = sum(totals.values(), ZERO)

        rows = [
            CategorySpending(
                category_id=category_id,
                category_name=names[category_id],
                total_amount=quantize_money(totals[category_id]),
                transaction_count=counts[category_id],
                percentage_of_total=percentage(totals[category_id], grand_total),
            )
            for category_id in sorted(totals)
        ]

        logger.debug(
            "category_spending_aggregated",
            user_id=user_id,
            categories=len(rows),
            grand_total=str(grand_total),
        )
        return rows


def top_spending_categories(
    rows: list[CategorySpending],
    limit: int = 5,
) -> list[CategorySpending]:
    """The biggest categories first, for display."""
    return sorted(rows, key=lambda row: row.total_amount, reverse=True)[:limit]
