"""
Shared fixtures.

Records are written through InMemoryRecordStore so fixtures obey the
same write rules as the surrounding application.
"""

import itertools
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from src.models.records import (
    Budget,
    BudgetPeriod,
    Debt,
    DebtType,
    Investment,
    InvestmentType,
    Transaction,
    TransactionCategory,
    TransactionKind,
)
from src.services.storage import InMemoryRecordStore

USER_ID = 1
OTHER_USER_ID = 2

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)


class RecordFactory:
    """Builds records with sequential ids and stores them."""

    def __init__(self, store: InMemoryRecordStore):
        self.store = store
        self._ids = itertools.count(1)
        self._default_categories: dict[tuple[int, TransactionKind], TransactionCategory] = {}

    def category(
        self,
        name: str,
        kind: TransactionKind = TransactionKind.EXPENSE,
        user_id: int = USER_ID,
    ) -> TransactionCategory:
        return self.store.add_category(
            TransactionCategory(id=next(self._ids), name=name, kind=kind, user_id=user_id)
        )

    def _default_category(self, kind: TransactionKind, user_id: int) -> TransactionCategory:
        key = (user_id, kind)
        if key not in self._default_categories:
            name = "Salary" if kind == TransactionKind.INCOME else "General"
            self._default_categories[key] = self.category(name, kind, user_id)
        return self._default_categories[key]

    def transaction(
        self,
        amount: str,
        on: date,
        kind: TransactionKind = TransactionKind.EXPENSE,
        category: Optional[TransactionCategory] = None,
        user_id: int = USER_ID,
    ) -> Transaction:
        category = category or self._default_category(kind, user_id)
        return self.store.add_transaction(
            Transaction(
                id=next(self._ids),
                user_id=user_id,
                amount=Decimal(amount),
                description=f"{kind.value} on {on.isoformat()}",
                kind=kind,
                category_id=category.id,
                transaction_date=on,
            )
        )

    def income(self, amount: str, on: date, **kwargs) -> Transaction:
        return self.transaction(amount, on, kind=TransactionKind.INCOME, **kwargs)

    def expense(self, amount: str, on: date, **kwargs) -> Transaction:
        return self.transaction(amount, on, kind=TransactionKind.EXPENSE, **kwargs)

    def budget(
        self,
        name: str,
        amount: str,
        start: date,
        end: date,
        category: Optional[TransactionCategory] = None,
        user_id: int = USER_ID,
    ) -> Budget:
        return self.store.add_budget(
            Budget(
                id=next(self._ids),
                user_id=user_id,
                name=name,
                category_id=category.id if category else None,
                budget_amount=Decimal(amount),
                period_type=BudgetPeriod.MONTHLY,
                start_date=start,
                end_date=end,
            )
        )

    def investment(
        self,
        current_value: str,
        user_id: int = USER_ID,
        quantity: str = "1",
    ) -> Investment:
        return self.store.add_investment(
            Investment(
                id=next(self._ids),
                user_id=user_id,
                name=f"Position {current_value}",
                type=InvestmentType.STOCK,
                quantity=Decimal(quantity),
                purchase_price=Decimal("1.00"),
                current_value=Decimal(current_value),
                purchase_date=date(2023, 6, 1),
            )
        )

    def debt(self, current_balance: str, user_id: int = USER_ID) -> Debt:
        return self.store.add_debt(
            Debt(
                id=next(self._ids),
                user_id=user_id,
                lender="Bank",
                debt_type=DebtType.LOAN,
                original_amount=Decimal("10000.00"),
                current_balance=Decimal(current_balance),
                interest_rate=Decimal("0.0525"),
                minimum_payment=Decimal("200.00"),
            )
        )


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def records(store) -> RecordFactory:
    return RecordFactory(store)
