"""
Data Models Package

This package contains all Pydantic models used by the Expense Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from expense_ledger.models.expense import (
    AmountOutcome,
    CategoryTotal,
    ExpenseDraft,
    ExpensePatch,
    ExpenseRecord,
    ExportPayload,
    FilterCriteria,
    ImportReport,
    LedgerSummary,
    ParsedAmount,
    new_expense_id,
)
from expense_ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)

__all__ = [
    # Expense models
    "AmountOutcome",
    "CategoryTotal",
    "ExpenseDraft",
    "ExpensePatch",
    "ExpenseRecord",
    "ExportPayload",
    "FilterCriteria",
    "ImportReport",
    "LedgerSummary",
    "ParsedAmount",
    "new_expense_id",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
]
