"""
Ledger Exceptions

DESIGN DECISION: Direct user actions (add/edit) raise and the caller
decides how to show the problem. Corruption in persisted data and bad
elements inside an import are recovered locally and never surface as
these exceptions, except FormatError for an unusable import payload.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError, ValueError):
    """A record failed validation (amount not finite or not positive, bad fields)."""
    pass


class NotFoundError(LedgerError):
    """No record with the requested id exists."""

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class FormatError(LedgerError):
    """An import payload is not a JSON array of expense objects."""

    DEFAULT_MESSAGE = (
        "Failed to import. Make sure the JSON file contains "
        "a valid array of expense objects."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class PersistenceReadError(LedgerError):
    """
    The durable slot holds data that cannot be loaded.

    Internal only: the store catches this and starts with an empty ledger.
    """
    pass
