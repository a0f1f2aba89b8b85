"""
Tests for the Reporting Engine

Test strategy:
1. Unit tests for individual components (models, money helpers)
2. Calculator tests against the in-memory record store
3. No real API calls in tests (Sheets access goes through a fake client)
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from src.models.records import (
    Budget,
    BudgetPeriod,
    BudgetUpdate,
    Investment,
    InvestmentType,
    Transaction,
    TransactionKind,
    TransactionUpdate,
)
from src.models.reports import ReportPeriodPreset, ReportQuery
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.money import percentage, quantize_money, to_decimal


def make_transaction(**overrides) -> Transaction:
    data = dict(
        id=1,
        user_id=1,
        amount=Decimal("25.00"),
        description="Groceries",
        kind=TransactionKind.EXPENSE,
        category_id=3,
        transaction_date=date(2024, 1, 5),
    )
    data.update(overrides)
    return Transaction(**data)


def make_budget(**overrides) -> Budget:
    data = dict(
        id=1,
        user_id=1,
        name="Food",
        category_id=3,
        budget_amount=Decimal("300.00"),
        period_type=BudgetPeriod.MONTHLY,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )
    data.update(overrides)
    return Budget(**data)


class TestRecordModels:
    """Tests for the persisted record models."""

    def test_transaction_creation(self):
        txn = make_transaction()
        assert txn.amount == Decimal("25.00")
        assert txn.kind == TransactionKind.EXPENSE

    def test_transaction_rejects_non_positive_amount(self):
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("0"))
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("-5.00"))

    def test_transaction_rejects_sub_cent_amount(self):
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("1.005"))

    def test_transaction_description_strips_whitespace(self):
        assert make_transaction(description="  Rent  ").description == "Rent"

    def test_budget_without_category_is_overall(self):
        assert make_budget(category_id=None).is_overall is True
        assert make_budget().is_overall is False

    def test_budget_overlap(self):
        """Overlap, not containment, decides whether a budget is active."""
        budget = make_budget(start_date=date(2024, 1, 20), end_date=date(2024, 2, 10))
        assert budget.overlaps(date(2024, 1, 1), date(2024, 1, 31))
        assert budget.overlaps(date(2024, 2, 10), date(2024, 2, 28))
        assert not budget.overlaps(date(2024, 2, 11), date(2024, 2, 28))
        assert not budget.overlaps(date(2024, 1, 1), date(2024, 1, 19))

    def test_investment_keeps_eight_decimal_quantity(self):
        investment = Investment(
            id=1,
            user_id=1,
            name="Bitcoin",
            type=InvestmentType.CRYPTOCURRENCY,
            quantity=Decimal("0.00012345"),
            purchase_price=Decimal("42000.00"),
            current_value=Decimal("5.25"),
            purchase_date=date(2023, 3, 1),
        )
        assert investment.quantity == Decimal("0.00012345")


class TestRecordUpdates:
    """Sparse updates only touch provided fields."""

    def test_only_provided_fields_change(self):
        txn = make_transaction()
        updated = TransactionUpdate(amount=Decimal("30.00")).apply_to(txn)

        assert updated.amount == Decimal("30.00")
        assert updated.description == txn.description
        assert updated.kind == txn.kind
        assert updated.updated_at >= txn.updated_at

    def test_explicit_none_clears_budget_category(self):
        budget = make_budget()
        updated = BudgetUpdate(category_id=None).apply_to(budget)
        assert updated.category_id is None

    def test_omitted_field_is_not_cleared(self):
        budget = make_budget()
        updated = BudgetUpdate(name="Groceries").apply_to(budget)
        assert updated.category_id == 3
        assert updated.name == "Groceries"

    def test_update_is_revalidated(self):
        with pytest.raises(ValueError):
            TransactionUpdate(amount=Decimal("-1.00"))


class TestReportQuery:
    """Preset resolution."""

    def test_current_month_in_leap_february(self):
        query = ReportQuery.for_preset(1, ReportPeriodPreset.CURRENT_MONTH, today=date(2024, 2, 10))
        assert query.period_start == date(2024, 2, 1)
        assert query.period_end == date(2024, 2, 29)

    def test_last_month_rolls_over_year(self):
        query = ReportQuery.for_preset(1, ReportPeriodPreset.LAST_MONTH, today=date(2024, 1, 15))
        assert query.period_start == date(2023, 12, 1)
        assert query.period_end == date(2023, 12, 31)

    def test_current_year(self):
        query = ReportQuery.for_preset(1, ReportPeriodPreset.CURRENT_YEAR, today=date(2024, 6, 15))
        assert query.period_start == date(2024, 1, 1)
        assert query.period_end == date(2024, 12, 31)

    def test_custom_range(self):
        query = ReportQuery.for_preset(
            1,
            ReportPeriodPreset.CUSTOM,
            custom_start=date(2024, 3, 3),
            custom_end=date(2024, 4, 4),
        )
        assert (query.period_start, query.period_end) == (date(2024, 3, 3), date(2024, 4, 4))

    def test_custom_without_range_is_today(self):
        today = date(2024, 5, 5)
        query = ReportQuery.for_preset(1, ReportPeriodPreset.CUSTOM, today=today)
        assert query.period_start == query.period_end == today

    def test_iso_strings_are_accepted(self):
        query = ReportQuery.model_validate(
            {"user_id": 1, "period_start": "2024-01-01", "period_end": "2024-01-31"}
        )
        assert query.period_end == date(2024, 1, 31)


class TestMoneyHelpers:
    """Decimal parsing and guarded percentages."""

    def test_to_decimal_parses_stored_text(self):
        assert to_decimal("1,200.50") == Decimal("1200.50")
        assert to_decimal(" 12.00 ") == Decimal("12.00")
        assert to_decimal("") == Decimal("0")
        assert to_decimal(0.1) == Decimal("0.1")

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_decimal("twelve")
        with pytest.raises(ValueError):
            to_decimal("NaN")

    def test_quantize_money_rounds_half_up(self):
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")

    def test_percentage_guards_zero_whole(self):
        assert percentage(Decimal("10"), Decimal("0")) == 0.0
        assert percentage(Decimal("0"), Decimal("0")) == 0.0

    def test_percentage(self):
        assert percentage(Decimal("650"), Decimal("3000")) == pytest.approx(21.6667, abs=1e-4)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.REPORT_REQUESTED,
            description="Report requested",
        )
        assert event.event_type == AuditEventType.REPORT_REQUESTED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.report_requested(
            report_type="financial_summary",
            user_id=7,
            period_start=date(2024, 1, 1),
            period_end=date(2024, 1, 31),
            correlation_id=uuid4(),
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "report_requested"
        assert log_dict["user_id"] == 7
        assert log_dict["details"]["period_end"] == "2024-01-31"

    def test_audit_event_to_sheets_row(self):
        event = AuditEventBuilder.report_failed(
            report_type="category_spending",
            user_id=7,
            error=RuntimeError("boom"),
            correlation_id=uuid4(),
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "report_failed"
        assert row[3] == "error"
        assert row[9] == "RuntimeError"
        assert row[10] == "boom"

    def test_storage_timeout_is_a_warning(self):
        event = AuditEventBuilder.storage_timeout(
            report_type="financial_summary",
            user_id=1,
            error_message="too slow",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_type == "StorageTimeoutError"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
