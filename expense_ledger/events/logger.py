"""
Ledger Event Logger

DESIGN DECISION: Every mutation of the ledger is logged.
This provides:
1. Traceability of what happened to the collection
2. A visible trace when persisted data had to be discarded

The event logger:
- Is synchronous, like the rest of the ledger
- Only writes to the local structured log, nothing is persisted
- Maps event severity onto the log level
"""

import logging
from typing import Any, Optional

import structlog

from expense_ledger.config import LoggingSettings
from expense_ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerSeverity,
)
from expense_ledger.models.expense import ExpenseRecord, ImportReport


LOGGER_NAME = "expense_ledger"


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog for local logging.

    Safe to call more than once; the last call wins.
    """
    settings = settings or LoggingSettings()

    logging.getLogger(LOGGER_NAME).setLevel(getattr(logging, settings.level))

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = LOGGER_NAME) -> Any:
    return structlog.get_logger(name)


class EventLogger:
    """
    Central ledger event logging service.

    The underlying logger can be injected, which is how tests
    capture emitted events.
    """

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or get_logger()

    def log(self, event: LedgerEvent) -> None:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == LedgerSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def log_expense_added(self, record: ExpenseRecord) -> None:
        self.log(LedgerEventBuilder.expense_added(
            expense_id=record.id,
            category=record.category,
            amount=record.amount,
        ))

    def log_expense_updated(self, expense_id: str, changed_fields: list[str]) -> None:
        self.log(LedgerEventBuilder.expense_updated(
            expense_id=expense_id,
            changed_fields=changed_fields,
        ))

    def log_expense_deleted(self, expense_id: str) -> None:
        self.log(LedgerEventBuilder.expense_deleted(expense_id))

    def log_collection_replaced(self, previous_count: int, new_count: int) -> None:
        self.log(LedgerEventBuilder.collection_replaced(
            previous_count=previous_count,
            new_count=new_count,
        ))

    def log_collection_loaded(self, key: str, count: int) -> None:
        self.log(LedgerEventBuilder.collection_loaded(key=key, count=count))

    def log_persistence_read_failed(self, key: str, error_message: str) -> None:
        self.log(LedgerEventBuilder.persistence_read_failed(
            key=key,
            error_message=error_message,
        ))

    def log_persistence_repaired(self, key: str, report: ImportReport) -> None:
        self.log(LedgerEventBuilder.persistence_repaired(
            key=key,
            dropped=report.dropped,
            defaulted_fields=report.defaulted_fields,
            reassigned_ids=report.reassigned_ids,
        ))

    def log_import_completed(self, report: ImportReport) -> None:
        self.log(LedgerEventBuilder.import_completed(
            accepted=report.accepted,
            dropped=report.dropped,
            defaulted_fields=report.defaulted_fields,
        ))

    def log_import_rejected(self, error_message: str) -> None:
        self.log(LedgerEventBuilder.import_rejected(error_message))

    def log_export_generated(self, filename: str, count: int) -> None:
        self.log(LedgerEventBuilder.export_generated(filename=filename, count=count))


configure_logging()
