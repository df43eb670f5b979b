"""Category registry package."""

from expense_ledger.categories.registry import CategoryRegistry

__all__ = ["CategoryRegistry"]
