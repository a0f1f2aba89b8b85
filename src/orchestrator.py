"""
Main Orchestrator for the Reporting Engine

This module ties the calculators to a record store and exposes the
two read operations the presentation layer consumes:
1. Financial summary (totals, snapshots, budget performance)
2. Category spending breakdown

DESIGN DECISION: The orchestrator enforces the boundaries:
- Reports are pure reads; nothing is ever written to the record store
- Every request is audited, including failures
- Failures are never turned into partial or empty reports; they propagate
"""

from typing import Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings, validate_all_settings
from src.models.reports import CategorySpending, FinancialSummary, ReportQuery
from src.reports import (
    BudgetPerformanceEvaluator,
    CategorySpendingAggregator,
    FinancialSummaryComposer,
    top_spending_categories,
)
from src.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    StorageError,
    StorageTimeoutError,
)

logger = structlog.get_logger(__name__)

FINANCIAL_SUMMARY = "financial_summary"
CATEGORY_SPENDING = "category_spending"


class ReportingFlow:
    """
    Entry point for report requests.

    Flow:
    1. Audit the request
    2. Run the calculator against the record store
    3. Audit the outcome
    4. Return the report, or re-raise the original error
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        query_timeout_seconds: Optional[float] = None,
        max_concurrent_budget_queries: Optional[int] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        budget_evaluator = BudgetPerformanceEvaluator(
            store,
            query_timeout_seconds=query_timeout_seconds,
            max_concurrent_queries=max_concurrent_budget_queries,
        )
        self._summary_composer = FinancialSummaryComposer(
            store,
            budget_evaluator=budget_evaluator,
            query_timeout_seconds=query_timeout_seconds,
        )
        self._spending_aggregator = CategorySpendingAggregator(
            store,
            query_timeout_seconds=query_timeout_seconds,
        )

    async def get_financial_summary(
        self,
        query: ReportQuery,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialSummary:
        """
        Compute the financial summary for a user and period.

        An unknown user gets an all-zero summary, not an error.

        Raises:
            StorageError: Any record store failure, unchanged
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._audit_requested(FINANCIAL_SUMMARY, query, correlation_id)

        try:
            summary = await self._summary_composer.compose(query)
        except Exception as e:
            await self._audit_failure(FINANCIAL_SUMMARY, query, e, correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_financial_summary_generated(
                user_id=query.user_id,
                net_income=str(summary.net_income),
                budget_count=len(summary.budget_performance),
                correlation_id=correlation_id,
            )
        return summary

    async def get_category_spending(
        self,
        query: ReportQuery,
        correlation_id: Optional[UUID] = None,
    ) -> list[CategorySpending]:
        """
        Break the period's expenses down by category.

        Rows are ordered by category_id; see get_top_spending_categories
        for a display ordering.

        Raises:
            StorageError: Any record store failure, unchanged
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._audit_requested(CATEGORY_SPENDING, query, correlation_id)

        try:
            rows = await self._spending_aggregator.aggregate(
                query.user_id, query.period_start, query.period_end
            )
        except Exception as e:
            await self._audit_failure(CATEGORY_SPENDING, query, e, correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_category_spending_generated(
                user_id=query.user_id,
                category_count=len(rows),
                correlation_id=correlation_id,
            )
        return rows

    async def get_top_spending_categories(
        self,
        query: ReportQuery,
        limit: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[CategorySpending]:
        """The biggest spending categories of the period, largest first."""
        if limit is None:
            limit = get_settings().reports.top_categories_limit
        rows = await self.get_category_spending(query, correlation_id)
        return top_spending_categories(rows, limit)

    async def _audit_requested(
        self,
        report_type: str,
        query: ReportQuery,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_report_requested(
                report_type=report_type,
                user_id=query.user_id,
                period_start=query.period_start,
                period_end=query.period_end,
                correlation_id=correlation_id,
            )

    async def _audit_failure(
        self,
        report_type: str,
        query: ReportQuery,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        if not self._audit_logger:
            logger.error(
                "report_failed",
                report_type=report_type,
                user_id=query.user_id,
                error=str(error),
            )
            return

        if isinstance(error, StorageTimeoutError):
            await self._audit_logger.log_storage_timeout(
                report_type=report_type,
                user_id=query.user_id,
                error_message=str(error),
                correlation_id=correlation_id,
            )
        elif not isinstance(error, StorageError):
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"report_type": report_type, "user_id": query.user_id},
                correlation_id=correlation_id,
            )
        await self._audit_logger.log_report_failed(
            report_type=report_type,
            user_id=query.user_id,
            error=error,
            correlation_id=correlation_id,
        )


def create_app_components(
    use_storage: bool = True,
) -> tuple[ReportingFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to honour the configured storage backend.
                    Set to False to run against an empty in-memory store.

    Returns:
        (reporting_flow, sheets_client)

    Raises:
        ValueError: If any setting in use is invalid. A misconfigured
                    Google Sheets backend raises here instead of falling
                    back, since reports over an empty store would read as zeros.
    """
    validation = validate_all_settings(check_storage=use_storage)
    invalid = [name for name, ok in validation.items() if ok is False]
    if invalid:
        errors = "; ".join(str(validation.get(f"{name}_error", name)) for name in invalid)
        raise ValueError(f"Invalid settings ({', '.join(invalid)}): {errors}")

    settings = get_settings()
    sheets_client = None

    if use_storage and settings.app.storage_backend == "google_sheets":
        sheets_client = GoogleSheetsClient()
        store: RecordStoreInterface = GoogleSheetsRecordStore(sheets_client)
        audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
    else:
        store = InMemoryRecordStore()
        audit_logger = AuditLogger()  # Local-only logging

    reports = settings.reports
    flow = ReportingFlow(
        store,
        audit_logger=audit_logger,
        query_timeout_seconds=reports.query_timeout_seconds,
        max_concurrent_budget_queries=reports.max_concurrent_budget_queries,
    )

    return flow, sheets_client
