"""
Storage Services Package

Provides the abstract record store interface and its implementations.
Google Sheets is the production backend; the in-memory store backs tests
and local runs.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    IntegrityError,
    MalformedRecordError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
    StorageTimeoutError,
)
from src.services.storage.memory import InMemoryAuditStorage, InMemoryRecordStore
from src.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "IntegrityError",
    "MalformedRecordError",
    "NotFoundError",
    "StorageError",
    "StorageTimeoutError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
]
