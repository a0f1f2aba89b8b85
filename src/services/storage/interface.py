"""
Abstract Record Store Interface

DESIGN DECISION: The reporting engine talks to an abstract interface.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the aggregation logic decoupled from storage implementation

The interface is read-only on purpose. Writing records is the job of
the surrounding application; reports never mutate anything.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.records import (
    Budget,
    Debt,
    Investment,
    Transaction,
    TransactionCategory,
    TransactionKind,
)


class RecordStoreInterface(ABC):
    """
    Abstract interface for reading a user's finance records.

    Every query is scoped to a single user. Date filters are inclusive.
    """

    @abstractmethod
    async def list_transactions(
        self,
        user_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        """
        List a user's transactions.

        Args:
            user_id: Owner of the transactions
            date_from: Keep transactions on or after this date
            date_to: Keep transactions on or before this date
            kind: Keep only income or only expense
            category_id: Keep only this category

        Returns:
            Matching transactions ordered by (transaction_date, id)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def list_categories(self, user_id: int) -> list[TransactionCategory]:
        """List a user's categories ordered by id."""
        pass

    @abstractmethod
    async def list_budgets(
        self,
        user_id: int,
        active_from: Optional[date] = None,
        active_to: Optional[date] = None,
    ) -> list[Budget]:
        """
        List a user's budgets.

        When both bounds are given only budgets whose window overlaps
        [active_from, active_to] are returned:
        start_date <= active_to AND end_date >= active_from.
        """
        pass

    @abstractmethod
    async def list_investments(self, user_id: int) -> list[Investment]:
        """List all of a user's investments."""
        pass

    @abstractmethod
    async def list_debts(self, user_id: int) -> list[Debt]:
        """List all of a user's debts."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for one request, in chronological order."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    retryable = False


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class IntegrityError(StorageError):
    """A write would break a cross-record rule (e.g. category kind)."""
    pass


class MalformedRecordError(StorageError):
    """A stored row could not be parsed into a record."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""

    retryable = True


class StorageTimeoutError(StorageError):
    """A query did not finish within the configured timeout."""

    retryable = True
