"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists through a single durable
key-value slot. Keeping the contract this small allows us to:
1. Keep the whole collection in one JSON document
2. Use in-memory storage for testing
3. Swap the file backend for anything that can store a string

The interface knows nothing about expenses. It moves
raw text; parsing and validation belong to the record store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class PersistenceAdapter(ABC):
    """
    Abstract durable key-value slot.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """
        Read the raw contents of a slot.

        Args:
            key: The slot identifier

        Returns:
            The stored text, or None if the slot has never been written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, raw: str) -> None:
        """
        Replace the contents of a slot.

        Args:
            key: The slot identifier
            raw: Text to store

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass
