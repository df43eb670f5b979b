"""
Record Store

The single owner of the ledger's records.

GUARANTEES:
- Every record in the collection has a finite amount > 0
- Ids are unique across the collection at all times
- A failed add/update leaves the collection exactly as it was
- Every successful mutation rewrites the durable slot before returning

Collection order is insertion order. Display order (newest first)
is derived by the filter engine and never persisted.
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expense_ledger.categories import CategoryRegistry
from expense_ledger.errors import (
    FormatError,
    NotFoundError,
    PersistenceReadError,
    ValidationError,
)
from expense_ledger.events import EventLogger
from expense_ledger.models.expense import (
    ExpenseDraft,
    ExpensePatch,
    ExpenseRecord,
    ExportPayload,
    ImportReport,
    new_expense_id,
)
from expense_ledger.services.storage import PersistenceAdapter
from expense_ledger.validation import normalize_with_report, require_valid_amount


DEFAULT_STORAGE_KEY = "expense_tracker_items_v1"


def _describe(error: PydanticValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "record"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class ExpenseStore:
    """
    In-memory collection of expenses backed by one durable slot.

    Collaborators are injected so tests can pin the clock and the id
    sequence and inspect what was written.
    """

    def __init__(
        self,
        storage: PersistenceAdapter,
        registry: Optional[CategoryRegistry] = None,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        event_logger: Optional[EventLogger] = None,
        id_factory: Callable[[], str] = new_expense_id,
        clock: Callable[[], datetime] = datetime.now,
        fallback_category: str = "Other",
        export_filename: str = "expenses.json",
        export_indent: int = 2,
    ):
        self._storage = storage
        self._registry = registry if registry is not None else CategoryRegistry()
        self._key = key
        self._events = event_logger or EventLogger()
        self._id_factory = id_factory
        self._clock = clock
        self._fallback_category = fallback_category
        self._export_filename = export_filename
        self._export_indent = export_indent
        self._records: list[ExpenseRecord] = []

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def records(self) -> tuple[ExpenseRecord, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._records)

    @property
    def registry(self) -> CategoryRegistry:
        return self._registry

    @property
    def key(self) -> str:
        return self._key

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    def get(self, expense_id: str) -> Optional[ExpenseRecord]:
        index = self._index_of(expense_id)
        return None if index is None else self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ExpenseRecord]:
        return iter(tuple(self._records))

    def __contains__(self, expense_id: object) -> bool:
        return any(record.id == expense_id for record in self._records)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        draft: Union[ExpenseDraft, Mapping, None] = None,
        **fields: Any,
    ) -> ExpenseRecord:
        """
        Append a new expense with a freshly generated id.

        Accepts an ExpenseDraft, a mapping, or keyword fields.
        Missing date defaults to today, missing category to the
        fallback category.

        Raises:
            ValidationError: If the amount is not a finite number > 0,
                or the fields are malformed. Nothing is added or written.
        """
        draft = self._coerce_input(ExpenseDraft, draft if draft is not None else fields)
        amount = require_valid_amount(draft.amount)

        record = self._validate_record({
            "id": self._new_id(),
            "date": draft.date or self.today().isoformat(),
            "category": draft.category or self._fallback_category,
            "description": draft.description,
            "amount": amount,
        })

        self._records.append(record)
        self._registry.ensure(record.category)
        self._persist()
        self._events.log_expense_added(record)
        return record

    def update(
        self,
        expense_id: str,
        patch: Union[ExpensePatch, Mapping, None] = None,
        **fields: Any,
    ) -> ExpenseRecord:
        """
        Edit an existing expense in place (same id, same position).

        Raises:
            NotFoundError: If no record has this id
            ValidationError: If the patched amount or fields are invalid.
                The original record is left untouched.
        """
        index = self._index_of(expense_id)
        if index is None:
            raise NotFoundError(expense_id)

        patch = self._coerce_input(ExpensePatch, patch if patch is not None else fields)
        changes = patch.changes()
        if "amount" in changes:
            changes["amount"] = require_valid_amount(changes["amount"])

        current = self._records[index]
        updated = self._validate_record({**current.model_dump(), **changes})
        changed_fields = [
            name for name in changes
            if getattr(updated, name) != getattr(current, name)
        ]

        self._records[index] = updated
        self._registry.ensure(updated.category)
        self._persist()
        self._events.log_expense_updated(expense_id, changed_fields)
        return updated

    def remove(self, expense_id: str) -> bool:
        """
        Delete an expense.

        Removing an id that does not exist is a no-op, not an error.
        Returns True if a record was removed.
        """
        remaining = [record for record in self._records if record.id != expense_id]
        removed = len(remaining) != len(self._records)

        self._records = remaining
        self._persist()
        if removed:
            self._events.log_expense_deleted(expense_id)
        return removed

    def replace_all(self, records: Iterable[Union[ExpenseRecord, Mapping]]) -> None:
        """
        Swap the entire collection for a new validated set.

        Nothing changes unless every record validates.

        Raises:
            ValidationError: If any record is invalid or ids repeat
        """
        validated: list[ExpenseRecord] = []
        seen: set[str] = set()
        for item in records:
            record = item if isinstance(item, ExpenseRecord) else self._validate_record(item)
            if record.id in seen:
                raise ValidationError(f"Duplicate expense id: {record.id}")
            seen.add(record.id)
            validated.append(record)

        previous_count = len(self._records)
        self._records = validated
        for record in validated:
            self._registry.ensure(record.category)
        self._persist()
        self._events.log_collection_replaced(previous_count, len(validated))

    def clear(self) -> None:
        """Remove every expense."""
        self.replace_all([])

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load_from_persistence(self) -> None:
        """
        Replace the in-memory collection with the durable slot's contents.

        A missing slot gives an empty ledger. Unparseable contents
        (bad JSON, or not an array) are logged and also give an empty
        ledger; the error is never raised. Individual elements go
        through the same repair rules as an import, so one bad element
        never costs the others. Storage backend failures (StorageError)
        still propagate.
        """
        raw = self._storage.load(self._key)
        try:
            data = self._decode(raw)
        except PersistenceReadError as e:
            self._events.log_persistence_read_failed(self._key, str(e))
            data = []

        report = normalize_with_report(
            data,
            self._registry,
            id_factory=self._id_factory,
            today=self.today(),
            fallback_category=self._fallback_category,
        )
        if report.dropped or report.reassigned_ids or report.defaulted_fields:
            self._events.log_persistence_repaired(self._key, report)

        self._records = list(report.records)
        self._events.log_collection_loaded(self._key, len(self._records))

    def _decode(self, raw: Optional[str]) -> list[Any]:
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PersistenceReadError(f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise PersistenceReadError(f"Expected a JSON array, got {type(data).__name__}")
        return data

    def _persist(self) -> None:
        raw = json.dumps(
            [record.model_dump() for record in self._records],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        self._storage.save(self._key, raw)

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export(self) -> ExportPayload:
        """Pretty-printed JSON of the whole collection, ready to download."""
        content = json.dumps(
            [record.model_dump() for record in self._records],
            indent=self._export_indent,
            ensure_ascii=False,
        ).encode("utf-8")

        self._events.log_export_generated(self._export_filename, len(self._records))
        return ExportPayload(filename=self._export_filename, content=content)

    def import_json(self, raw: Union[str, bytes]) -> ImportReport:
        """
        Replace the collection with the contents of an imported file.

        Elements are repaired or dropped individually (see
        normalize_with_report). The previous collection is discarded,
        not merged.

        Raises:
            FormatError: If the content is not a JSON array. The
                collection is left untouched.
        """
        try:
            data = json.loads(raw)
            report = normalize_with_report(
                data,
                self._registry,
                id_factory=self._id_factory,
                today=self.today(),
                fallback_category=self._fallback_category,
            )
        except FormatError as e:
            self._events.log_import_rejected(str(e))
            raise
        except ValueError as e:
            self._events.log_import_rejected(str(e))
            raise FormatError() from e

        self.replace_all(report.records)
        self._events.log_import_completed(report)
        return report

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _index_of(self, expense_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == expense_id:
                return index
        return None

    def _new_id(self) -> str:
        expense_id = self._id_factory()
        while expense_id in self:
            expense_id = self._id_factory()
        return expense_id

    def _coerce_input(self, model: type, value: Any) -> Any:
        if isinstance(value, model):
            return value
        try:
            return model.model_validate(value)
        except PydanticValidationError as e:
            raise ValidationError(_describe(e)) from e

    def _validate_record(self, data: Any) -> ExpenseRecord:
        try:
            return ExpenseRecord.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_describe(e)) from e
