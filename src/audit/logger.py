"""
Audit Logger

DESIGN DECISION: Every report request is logged.
This provides:
1. Traceability of report requests
2. Debugging capability when the record store misbehaves
3. User can see history of their reports

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_report_requested(
        self,
        report_type: str,
        user_id: int,
        period_start: date,
        period_end: date,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.report_requested(
            report_type=report_type,
            user_id=user_id,
            period_start=period_start,
            period_end=period_end,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_financial_summary_generated(
        self,
        user_id: int,
        net_income: str,
        budget_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.financial_summary_generated(
            user_id=user_id,
            net_income=net_income,
            budget_count=budget_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_category_spending_generated(
        self,
        user_id: int,
        category_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.category_spending_generated(
            user_id=user_id,
            category_count=category_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_failed(
        self,
        report_type: str,
        user_id: int,
        error: BaseException,
        correlation_id: UUID,
    ) -> None:
        """Log a failed report. The caller still re-raises the error."""
        event = AuditEventBuilder.report_failed(
            report_type=report_type,
            user_id=user_id,
            error=error,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_timeout(
        self,
        report_type: str,
        user_id: int,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.storage_timeout(
            report_type=report_type,
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a report request and pass it through.
    """
    return uuid4()
