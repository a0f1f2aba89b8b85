"""
Data Models Package

This package contains all Pydantic models used by the reporting engine:
the persisted finance records it reads, the reports it produces and the
audit events it emits.
"""

from src.models.records import (
    Budget,
    BudgetPeriod,
    BudgetUpdate,
    Debt,
    DebtType,
    DebtUpdate,
    Investment,
    InvestmentType,
    InvestmentUpdate,
    Transaction,
    TransactionCategory,
    TransactionKind,
    TransactionUpdate,
)
from src.models.reports import (
    BudgetPerformance,
    CategorySpending,
    FinancialSummary,
    ReportPeriodPreset,
    ReportQuery,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "Budget",
    "BudgetPeriod",
    "BudgetUpdate",
    "Debt",
    "DebtType",
    "DebtUpdate",
    "Investment",
    "InvestmentType",
    "InvestmentUpdate",
    "Transaction",
    "TransactionCategory",
    "TransactionKind",
    "TransactionUpdate",
    # Report models
    "BudgetPerformance",
    "CategorySpending",
    "FinancialSummary",
    "ReportPeriodPreset",
    "ReportQuery",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
