"""
Storage Services Package

Provides the durable slot contract and its implementations.
The JSON file backend is the default; the in-memory one is for tests.
"""

from expense_ledger.services.storage.interface import (
    PersistenceAdapter,
    StorageError,
)
from expense_ledger.services.storage.json_file import JsonFileStorage
from expense_ledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "PersistenceAdapter",
    # Exceptions
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
