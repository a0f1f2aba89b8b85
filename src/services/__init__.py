"""Services package."""

from src.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    MalformedRecordError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
    StorageTimeoutError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "MalformedRecordError",
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
    "StorageTimeoutError",
]
