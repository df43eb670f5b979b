"""Record store package."""

from expense_ledger.store.store import DEFAULT_STORAGE_KEY, ExpenseStore

__all__ = ["DEFAULT_STORAGE_KEY", "ExpenseStore"]
