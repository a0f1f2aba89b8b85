"""
Finance Reports - Source Package

The aggregation and reporting engine of a personal finance application.
It reads transactions, budgets, investments and debts and turns them into
a financial summary and a category spending breakdown.

DESIGN PRINCIPLES:
1. Reports are pure reads
2. Decimal arithmetic from storage to response
3. Fail loudly, never return partial reports
4. Every request is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Reports Team"
