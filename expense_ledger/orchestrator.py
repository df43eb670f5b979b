"""
Main Orchestrator for Expense Ledger

This module ties together all the components and defines the
interactive flows a front end drives:
1. Add / edit / delete a single expense
2. Clear everything, import a file, export a file
3. Build the current view (filtered rows + summary cards)

DESIGN DECISION: Interaction is a capability passed in, not code
living here. Whatever shows dialogs (terminal, web page, test)
implements `confirm` and `prompt_field`; the flows only call back
into it. Destructive whole-collection operations always ask first.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field

from expense_ledger.categories import CategoryRegistry
from expense_ledger.config import Settings, get_settings
from expense_ledger.errors import ValidationError
from expense_ledger.events import EventLogger, configure_logging
from expense_ledger.models.expense import (
    ExpenseRecord,
    ExportPayload,
    FilterCriteria,
    ImportReport,
    LedgerSummary,
    new_expense_id,
)
from expense_ledger.queries import filter_expenses, summarize
from expense_ledger.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    PersistenceAdapter,
)
from expense_ledger.store import ExpenseStore
from expense_ledger.validation import parse_amount


CONFIRM_DELETE = "Delete this expense?"
CONFIRM_CLEAR = "Clear ALL expenses? This action CANNOT be undone."
CONFIRM_IMPORT = "Replace ALL expenses with the contents of this file?"
INVALID_EDIT_AMOUNT = "Invalid amount. Edit cancelled."


class Interaction(Protocol):
    """Dialogs the flows need from whatever front end is in use."""

    def confirm(self, question: str) -> bool:
        ...

    def prompt_field(self, label: str, default: str) -> Optional[str]:
        """Ask for a value; None means the user cancelled."""
        ...


class AutoConfirm:
    """Non-interactive Interaction: says yes and keeps every default."""

    def confirm(self, question: str) -> bool:
        return True

    def prompt_field(self, label: str, default: str) -> Optional[str]:
        return default


def format_amount(value: float) -> str:
    """Two decimals with thousands separators, e.g. 1,234.50."""
    return f"{value:,.2f}"


class SummaryCard(BaseModel):
    """One label/value pair of the summary panel."""

    label: str
    value: str


class LedgerView(BaseModel):
    """Everything a front end needs to draw the ledger once."""
    model_config = ConfigDict(frozen=True)

    criteria: FilterCriteria
    records: list[ExpenseRecord] = Field(default_factory=list)
    summary: LedgerSummary
    categories: list[str] = Field(default_factory=list)

    @property
    def cards(self) -> list[SummaryCard]:
        top = self.summary.top_category
        return [
            SummaryCard(label="Filtered total", value=format_amount(self.summary.filtered_total)),
            SummaryCard(label="This month", value=format_amount(self.summary.month_total)),
            SummaryCard(
                label="Top category",
                value=f"{top.category}: {format_amount(top.total)}" if top else "—",
            ),
            SummaryCard(label="Entries", value=str(self.summary.entry_count)),
        ]


class LedgerController:
    """
    Orchestrates user-driven ledger flows.

    Validation failures on direct actions propagate to the caller;
    declined confirmations and cancelled prompts simply do nothing.
    """

    def __init__(
        self,
        store: ExpenseStore,
        interaction: Optional[Interaction] = None,
    ):
        self._store = store
        self._interaction = interaction or AutoConfirm()

    @property
    def store(self) -> ExpenseStore:
        return self._store

    def add_expense(self, **fields: Any) -> ExpenseRecord:
        return self._store.add(fields)

    def edit_expense(self, expense_id: str) -> Optional[ExpenseRecord]:
        """
        Edit an expense through field prompts.

        Returns the updated record, or None if the record is already
        gone or any prompt was cancelled.

        Raises:
            ValidationError: If the new amount is not a number > 0,
                or the new date is not YYYY-MM-DD
        """
        record = self._store.get(expense_id)
        if record is None:
            return None

        answers = {}
        for field, label, default in (
            ("date", "Edit date (YYYY-MM-DD):", record.date),
            ("category", "Edit category:", record.category),
            ("amount", "Edit amount:", str(record.amount)),
            ("description", "Edit description:", record.description),
        ):
            answer = self._interaction.prompt_field(label, default)
            if answer is None:
                return None
            answers[field] = answer

        amount = parse_amount(answers["amount"])
        if not amount.is_ok or amount.value <= 0:
            raise ValidationError(INVALID_EDIT_AMOUNT)
        answers["amount"] = amount.value
        # Stored dates may carry a time component; an untouched date is kept as is
        if answers["date"] == record.date:
            answers["date"] = ""

        return self._store.update(expense_id, answers)

    def delete_expense(self, expense_id: str) -> bool:
        """Delete after confirmation. Returns True if a record was removed."""
        if not self._interaction.confirm(CONFIRM_DELETE):
            return False
        return self._store.remove(expense_id)

    def clear_all(self) -> bool:
        """Wipe the ledger after confirmation. Returns True if it was wiped."""
        if not self._interaction.confirm(CONFIRM_CLEAR):
            return False
        self._store.clear()
        return True

    def import_file(self, raw: Union[str, bytes]) -> Optional[ImportReport]:
        """
        Replace the ledger with an imported file after confirmation.

        Returns None if the user declined.

        Raises:
            FormatError: If the file is not a JSON array
        """
        if not self._interaction.confirm(CONFIRM_IMPORT):
            return None
        return self._store.import_json(raw)

    def export_file(self) -> ExportPayload:
        return self._store.export()

    def view(
        self,
        criteria: Union[FilterCriteria, Mapping, None] = None,
        now: Optional[datetime] = None,
    ) -> LedgerView:
        """Filter the ledger and compute its summary for display."""
        if criteria is None:
            criteria = FilterCriteria()
        elif not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.model_validate(dict(criteria))

        records = self._store.records
        filtered = filter_expenses(records, criteria)
        summary = summarize(records, filtered, now or self._store.now())

        return LedgerView(
            criteria=criteria,
            records=filtered,
            summary=summary,
            categories=self._store.registry.all(),
        )


def create_storage(settings: Settings) -> PersistenceAdapter:
    """Build the persistence adapter selected in settings."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(
        storage_settings.data_dir,
        write_attempts=storage_settings.write_attempts,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    interaction: Optional[Interaction] = None,
    storage: Optional[PersistenceAdapter] = None,
    clock: Callable[[], datetime] = datetime.now,
    id_factory: Callable[[], str] = new_expense_id,
) -> LedgerController:
    """
    Factory function to create all application components.

    Args:
        settings: Configuration; defaults to get_settings()
        interaction: Dialog capability; defaults to AutoConfirm
        storage: Persistence adapter; defaults to the configured backend
        clock: Source of "now" for defaults and month totals
        id_factory: Source of fresh expense ids

    Returns:
        A controller whose store has already been loaded
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(settings.logging)

    store = ExpenseStore(
        storage or create_storage(settings),
        CategoryRegistry(app_settings.default_categories),
        key=settings.storage.key,
        event_logger=EventLogger(),
        id_factory=id_factory,
        clock=clock,
        fallback_category=app_settings.fallback_category,
        export_filename=app_settings.export_filename,
        export_indent=app_settings.export_indent,
    )
    store.load_from_persistence()

    return LedgerController(store, interaction)
