"""In-memory persistence adapter, used by tests and the `memory` backend."""

from typing import Optional

from expense_ledger.services.storage.interface import PersistenceAdapter


class InMemoryStorage(PersistenceAdapter):
    """Dict-backed slots. Keeps a write counter so callers can assert on saves."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def load(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def save(self, key: str, raw: str) -> None:
        self._slots[key] = raw
        self.write_count += 1
