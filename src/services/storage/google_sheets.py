"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the initial storage backend because:
1. Users can view and edit their records directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- Limited query capabilities (we filter in Python)
- Amounts are kept as decimal text and parsed to Decimal on read

Each record type lives in its own worksheet with a header row. gspread is
synchronous, so reads run in a worker thread to keep the event loop free
for the other report queries.
"""

import asyncio
import json
import threading
from datetime import date, datetime
from typing import Callable, Optional, TypeVar
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.config.settings import GoogleSheetsSettings
from src.models.audit import AuditEvent, AuditEventType, AuditSeverity
from src.models.records import (
    Budget,
    Debt,
    Investment,
    Transaction,
    TransactionCategory,
    TransactionKind,
)
from src.money import to_decimal
from src.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    MalformedRecordError,
    RecordStoreInterface,
    StorageError,
)

logger = structlog.get_logger(__name__)

# Column layouts, one list per worksheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "amount",
    "description",
    "kind",
    "category_id",
    "transaction_date",
    "created_at",
    "updated_at",
]

CATEGORY_COLUMNS = [
    "id",
    "name",
    "kind",
    "user_id",
    "created_at",
]

BUDGET_COLUMNS = [
    "id",
    "user_id",
    "name",
    "category_id",
    "budget_amount",
    "period_type",
    "start_date",
    "end_date",
    "created_at",
    "updated_at",
]

INVESTMENT_COLUMNS = [
    "id",
    "user_id",
    "name",
    "type",
    "quantity",
    "purchase_price",
    "current_value",
    "purchase_date",
    "created_at",
    "updated_at",
]

DEBT_COLUMNS = [
    "id",
    "user_id",
    "lender",
    "debt_type",
    "original_amount",
    "current_balance",
    "interest_rate",
    "minimum_payment",
    "due_date",
    "created_at",
    "updated_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "report_type",
    "user_id",
    "correlation_id",
    "description",
    "details_json",
    "error_type",
    "error_message",
]

# Cells parsed with to_decimal so "1,200.00" style text is accepted
DECIMAL_COLUMNS = {
    "amount",
    "budget_amount",
    "quantity",
    "purchase_price",
    "current_value",
    "original_amount",
    "current_balance",
    "interest_rate",
    "minimum_payment",
}

RecordT = TypeVar("RecordT", bound=BaseModel)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        # Guards lazy init; reads run in worker threads
        self._init_lock = threading.RLock()
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials with read access.
        """
        with self._init_lock:
            if self._client is None:
                try:
                    scopes = [
                        "https://www.googleapis.com/auth/spreadsheets",
                        "https://www.googleapis.com/auth/drive",
                    ]
                    credentials = Credentials.from_service_account_file(
                        self._settings.credentials_path,
                        scopes=scopes,
                    )
                    self._client = gspread.authorize(credentials)
                except FileNotFoundError:
                    raise ConnectionError(
                        f"Google credentials file not found: {self._settings.credentials_path}"
                    )
                except Exception as e:
                    raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

            return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        with self._init_lock:
            if self._spreadsheet is None:
                client = self.connect()
                try:
                    self._spreadsheet = client.open_by_key(
                        self._settings.spreadsheet_id
                    )
                except gspread.SpreadsheetNotFound:
                    raise ConnectionError(
                        f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                    )
            return self._spreadsheet

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def read_rows(self, sheet_name: str) -> list[list[str]]:
        """
        Read every data row of a worksheet (header excluded).

        A worksheet that does not exist yet holds no records.
        """
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(sheet_name)
        except gspread.WorksheetNotFound:
            return []
        return sheet.get_all_values()[1:]

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.audit_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.audit_sheet_name,
                rows=5000,
                cols=len(AUDIT_COLUMNS),
            )
            sheet.append_row(AUDIT_COLUMNS)
        return sheet


def _is_transient(error: gspread.exceptions.APIError) -> bool:
    """True for rate limiting (429) and server-side (5xx) responses."""
    status = getattr(getattr(error, "response", None), "status_code", None)
    return status is not None and (status == 429 or status >= 500)


def _row_to_record(
    model: type[RecordT],
    columns: list[str],
    row: list,
    row_number: int,
) -> RecordT:
    """
    Convert a spreadsheet row to a record.

    Empty cells are left out so model defaults (None, timestamps) apply.
    Anything unparseable raises MalformedRecordError; rows are never skipped.
    """
    data = {}
    for index, name in enumerate(columns):
        value = row[index].strip() if index < len(row) and row[index] else ""
        if not value:
            continue
        data[name] = to_decimal(value) if name in DECIMAL_COLUMNS else value

    try:
        return model.model_validate(data)
    except ValueError as e:
        raise MalformedRecordError(
            f"Row {row_number} is not a valid {model.__name__}: {e}"
        ) from e


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    Rows of other users are never parsed; only the user_id cell is checked.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def _read_user_records(
        self,
        sheet_name: str,
        model: type[RecordT],
        columns: list[str],
        user_id: int,
        keep: Optional[Callable[[RecordT], bool]] = None,
    ) -> list[RecordT]:
        try:
            rows = await asyncio.to_thread(self._client.read_rows, sheet_name)
        except StorageError:
            raise
        except gspread.exceptions.APIError as e:
            message = f"Failed to read worksheet {sheet_name}: {e}"
            if _is_transient(e):
                raise ConnectionError(message) from e
            raise StorageError(message) from e
        except Exception as e:
            raise StorageError(f"Failed to read worksheet {sheet_name}: {e}") from e

        user_column = columns.index("user_id")
        wanted = str(user_id)
        records = []
        # Row 1 is the header
        for row_number, row in enumerate(rows, start=2):
            if not row or not any(row):
                continue
            if user_column >= len(row) or row[user_column].strip() != wanted:
                continue
            try:
                record = _row_to_record(model, columns, row, row_number)
            except ValueError as e:
                raise MalformedRecordError(
                    f"Row {row_number} of {sheet_name} has a bad value: {e}"
                ) from e
            if keep is None or keep(record):
                records.append(record)

        logger.debug(
            "sheet_records_loaded",
            sheet=sheet_name,
            user_id=user_id,
            count=len(records),
        )
        return records

    async def list_transactions(
        self,
        user_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        def keep(txn: Transaction) -> bool:
            if date_from and txn.transaction_date < date_from:
                return False
            if date_to and txn.transaction_date > date_to:
                return False
            if kind and txn.kind != kind:
                return False
            if category_id is not None and txn.category_id != category_id:
                return False
            return True

        transactions = await self._read_user_records(
            self._client.settings.transactions_sheet_name,
            Transaction,
            TRANSACTION_COLUMNS,
            user_id,
            keep,
        )
        transactions.sort(key=lambda t: (t.transaction_date, t.id))
        return transactions

    async def list_categories(self, user_id: int) -> list[TransactionCategory]:
        categories = await self._read_user_records(
            self._client.settings.categories_sheet_name,
            TransactionCategory,
            CATEGORY_COLUMNS,
            user_id,
        )
        return sorted(categories, key=lambda c: c.id)

    async def list_budgets(
        self,
        user_id: int,
        active_from: Optional[date] = None,
        active_to: Optional[date] = None,
    ) -> list[Budget]:
        def keep(budget: Budget) -> bool:
            if active_from and active_to:
                return budget.overlaps(active_from, active_to)
            return True

        budgets = await self._read_user_records(
            self._client.settings.budgets_sheet_name,
            Budget,
            BUDGET_COLUMNS,
            user_id,
            keep,
        )
        return sorted(budgets, key=lambda b: b.id)

    async def list_investments(self, user_id: int) -> list[Investment]:
        investments = await self._read_user_records(
            self._client.settings.investments_sheet_name,
            Investment,
            INVESTMENT_COLUMNS,
            user_id,
        )
        return sorted(investments, key=lambda i: i.id)

    async def list_debts(self, user_id: int) -> list[Debt]:
        debts = await self._read_user_records(
            self._client.settings.debts_sheet_name,
            Debt,
            DEBT_COLUMNS,
            user_id,
        )
        return sorted(debts, key=lambda d: d.id)


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            report_type=safe_get(4) or None,
            user_id=int(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_type=safe_get(9) or None,
            error_message=safe_get(10) or None,
        )

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = await asyncio.to_thread(self._client.get_audit_sheet)
            await asyncio.to_thread(
                sheet.append_row, event.to_sheets_row(), value_input_option="RAW"
            )
            return True
        except Exception as e:
            # Audit logging must not break the report itself
            logger.warning(
                "audit_append_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            sheet = await asyncio.to_thread(self._client.get_audit_sheet)
            all_rows = (await asyncio.to_thread(sheet.get_all_values))[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}") from e

        events = []
        for row in all_rows:
            if row and len(row) > 6 and row[6] == str(correlation_id):
                events.append(self._row_to_event(row))

        events.sort(key=lambda e: e.timestamp)
        return events
