"""Services package."""

from expense_ledger.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    PersistenceAdapter,
    StorageError,
)

__all__ = [
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "PersistenceAdapter",
    "StorageError",
]
