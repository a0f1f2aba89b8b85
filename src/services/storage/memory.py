"""
In-Memory Storage Implementation

Dict-backed record store used by the tests and for local runs without
a spreadsheet. It also carries the small write path the surrounding
application would normally own, so fixtures go through the same rules.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.records import (
    Budget,
    BudgetUpdate,
    Debt,
    DebtUpdate,
    Investment,
    InvestmentUpdate,
    Transaction,
    TransactionCategory,
    TransactionKind,
    TransactionUpdate,
)
from src.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    RecordStoreInterface,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Keeps every record in a dict keyed by id."""

    def __init__(self):
        self._categories: dict[int, TransactionCategory] = {}
        self._transactions: dict[int, Transaction] = {}
        self._budgets: dict[int, Budget] = {}
        self._investments: dict[int, Investment] = {}
        self._debts: dict[int, Debt] = {}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def _insert(table: dict, record) -> None:
        if record.id in table:
            raise DuplicateError(f"{type(record).__name__} {record.id} already exists")
        table[record.id] = record

    @staticmethod
    def _get(table: dict, record_id: int, label: str):
        try:
            return table[record_id]
        except KeyError:
            raise NotFoundError(f"{label} not found: {record_id}")

    def _check_category(self, user_id: int, category_id: Optional[int]) -> TransactionCategory:
        category = self._categories.get(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(
                f"Category {category_id} not found for user {user_id}"
            )
        return category

    def add_category(self, category: TransactionCategory) -> TransactionCategory:
        self._insert(self._categories, category)
        return category

    def add_transaction(self, transaction: Transaction) -> Transaction:
        """
        Store a new transaction.

        The category must belong to the same user and have the same kind.
        """
        category = self._check_category(transaction.user_id, transaction.category_id)
        if category.kind != transaction.kind:
            raise IntegrityError(
                f"Category '{category.name}' is {category.kind.value}, "
                f"transaction is {transaction.kind.value}"
            )
        self._insert(self._transactions, transaction)
        return transaction

    def update_transaction(self, transaction_id: int, update: TransactionUpdate) -> Transaction:
        """
        Apply a partial update.

        NOTE: Kind/category agreement is only checked on create. An update
        may leave a transaction under a category of the other kind and the
        reports will aggregate it by its stored kind.
        """
        current = self._get(self._transactions, transaction_id, "Transaction")
        if "category_id" in update.model_fields_set:
            self._check_category(current.user_id, update.category_id)
        updated = update.apply_to(current)
        self._transactions[transaction_id] = updated
        return updated

    def add_budget(self, budget: Budget) -> Budget:
        if budget.category_id is not None:
            self._check_category(budget.user_id, budget.category_id)
        self._insert(self._budgets, budget)
        return budget

    def update_budget(self, budget_id: int, update: BudgetUpdate) -> Budget:
        current = self._get(self._budgets, budget_id, "Budget")
        if "category_id" in update.model_fields_set and update.category_id is not None:
            self._check_category(current.user_id, update.category_id)
        updated = update.apply_to(current)
        self._budgets[budget_id] = updated
        return updated

    def add_investment(self, investment: Investment) -> Investment:
        self._insert(self._investments, investment)
        return investment

    def update_investment(self, investment_id: int, update: InvestmentUpdate) -> Investment:
        current = self._get(self._investments, investment_id, "Investment")
        updated = update.apply_to(current)
        self._investments[investment_id] = updated
        return updated

    def add_debt(self, debt: Debt) -> Debt:
        self._insert(self._debts, debt)
        return debt

    def update_debt(self, debt_id: int, update: DebtUpdate) -> Debt:
        current = self._get(self._debts, debt_id, "Debt")
        updated = update.apply_to(current)
        self._debts[debt_id] = updated
        return updated

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        user_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        results = []
        for txn in self._transactions.values():
            if txn.user_id != user_id:
                continue
            if date_from and txn.transaction_date < date_from:
                continue
            if date_to and txn.transaction_date > date_to:
                continue
            if kind and txn.kind != kind:
                continue
            if category_id is not None and txn.category_id != category_id:
                continue
            results.append(txn)

        results.sort(key=lambda t: (t.transaction_date, t.id))
        return results

    async def list_categories(self, user_id: int) -> list[TransactionCategory]:
        return sorted(
            (c for c in self._categories.values() if c.user_id == user_id),
            key=lambda c: c.id,
        )

    async def list_budgets(
        self,
        user_id: int,
        active_from: Optional[date] = None,
        active_to: Optional[date] = None,
    ) -> list[Budget]:
        results = []
        for budget in self._budgets.values():
            if budget.user_id != user_id:
                continue
            if active_from and active_to and not budget.overlaps(active_from, active_to):
                continue
            results.append(budget)
        return sorted(results, key=lambda b: b.id)

    async def list_investments(self, user_id: int) -> list[Investment]:
        return sorted(
            (i for i in self._investments.values() if i.user_id == user_id),
            key=lambda i: i.id,
        )

    async def list_debts(self, user_id: int) -> list[Debt]:
        return sorted(
            (d for d in self._debts.values() if d.user_id == user_id),
            key=lambda d: d.id,
        )


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events
