"""
Audit Models for the Reporting Engine

Every report request is logged for audit purposes.
This provides:
1. Traceability of who asked for which period
2. Debugging information when a store query fails or times out
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.records import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Report requests
    REPORT_REQUESTED = "report_requested"
    FINANCIAL_SUMMARY_GENERATED = "financial_summary_generated"
    CATEGORY_SPENDING_GENERATED = "category_spending_generated"
    REPORT_FAILED = "report_failed"

    # Record store
    STORAGE_TIMEOUT = "storage_timeout"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which report and whose data
    report_type: Optional[str] = Field(
        default=None,
        description="'financial_summary' or 'category_spending'"
    )
    user_id: Optional[int] = None

    # Correlation - all events of one request share this
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "report_type": self.report_type,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, report_type, user_id,
         correlation_id, description, details_json, error_type, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.report_type or "",
            str(self.user_id) if self.user_id is not None else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_type or "",
            self.error_message or "",
        ]


def _period_details(period_start: date, period_end: date) -> dict:
    return {
        "period_start": period_start.isoformat(),
        "period_end": period_end.isoformat(),
    }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.report_requested("financial_summary", 1, start, end, cid)
    """

    @staticmethod
    def report_requested(
        report_type: str,
        user_id: int,
        period_start: date,
        period_end: date,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_REQUESTED,
            report_type=report_type,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Report requested: {report_type}",
            details=_period_details(period_start, period_end),
        )

    @staticmethod
    def financial_summary_generated(
        user_id: int,
        net_income: str,
        budget_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINANCIAL_SUMMARY_GENERATED,
            report_type="financial_summary",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Financial summary generated with {budget_count} budgets",
            details={
                "net_income": net_income,
                "budget_count": budget_count,
            },
        )

    @staticmethod
    def category_spending_generated(
        user_id: int,
        category_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_SPENDING_GENERATED,
            report_type="category_spending",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Category spending generated for {category_count} categories",
            details={"category_count": category_count},
        )

    @staticmethod
    def report_failed(
        report_type: str,
        user_id: int,
        error: BaseException,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_FAILED,
            severity=AuditSeverity.ERROR,
            report_type=report_type,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Report failed: {report_type}",
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def storage_timeout(
        report_type: str,
        user_id: int,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_TIMEOUT,
            severity=AuditSeverity.WARNING,
            report_type=report_type,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Record store query timed out; caller may retry",
            error_type="StorageTimeoutError",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_type=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
