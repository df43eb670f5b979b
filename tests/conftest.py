"""
Shared fixtures for Expense Ledger tests

Test strategy:
1. Unit tests for the pure pieces (models, amount parsing, filters, aggregation, normalization)
2. Store tests against in-memory storage with a pinned clock and id sequence
3. File storage tests in pytest's tmp_path, never the real data directory
"""

from datetime import datetime

import pytest

from expense_ledger.categories import CategoryRegistry
from expense_ledger.events import EventLogger
from expense_ledger.models.expense import ExpenseRecord
from expense_ledger.services.storage import InMemoryStorage
from expense_ledger.store import ExpenseStore


FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0)


class SequentialIds:
    """Deterministic id factory: exp-1, exp-2, ..."""

    def __init__(self, prefix: str = "exp"):
        self._prefix = prefix
        self._counter = 0

    def __call__(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter}"


class RecordingLogger:
    """Stands in for a structlog logger and remembers every call."""

    def __init__(self):
        self.calls = []

    def _record(self, level, event, **kwargs):
        self.calls.append((level, event, kwargs))

    def debug(self, event, **kwargs):
        self._record("debug", event, **kwargs)

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)

    def event_types(self):
        return [kwargs["event_type"] for _, _, kwargs in self.calls]


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def recorder():
    return RecordingLogger()


@pytest.fixture
def registry():
    return CategoryRegistry()


@pytest.fixture
def id_factory():
    return SequentialIds()


@pytest.fixture
def store(storage, registry, recorder, id_factory):
    return ExpenseStore(
        storage,
        registry,
        event_logger=EventLogger(recorder),
        id_factory=id_factory,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_record():
    """Build ExpenseRecords with sensible defaults."""

    def _make(expense_id, date="2024-01-01", category="Food", description="", amount=10.0):
        return ExpenseRecord(
            id=expense_id,
            date=date,
            category=category,
            description=description,
            amount=amount,
        )

    return _make
