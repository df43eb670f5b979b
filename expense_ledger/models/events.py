"""
Ledger Event Models

Every mutation of the ledger is described by a LedgerEvent and
written to the structured log. This provides:
1. Traceability of what changed and when
2. Debugging information when persisted data turns out to be corrupt

DESIGN DECISION: Events are logged, never stored. The ledger keeps
no historical trail of its own.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEventType(str, Enum):
    """Types of events the ledger reports."""
    # Record mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    COLLECTION_REPLACED = "collection_replaced"

    # Persistence
    COLLECTION_LOADED = "collection_loaded"
    PERSISTENCE_READ_FAILED = "persistence_read_failed"
    PERSISTENCE_REPAIRED = "persistence_repaired"

    # Import / export
    IMPORT_COMPLETED = "import_completed"
    IMPORT_REJECTED = "import_rejected"
    EXPORT_GENERATED = "export_generated"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: LedgerSeverity = LedgerSeverity.INFO

    expense_id: Optional[str] = Field(
        default=None,
        description="Record the event is about, if any"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.expense_added(expense_id, category, amount)
        event = LedgerEventBuilder.persistence_read_failed(key, error)
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        category: str,
        amount: float,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_ADDED,
            expense_id=expense_id,
            description=f"Expense added: {category} {amount:.2f}",
            details={
                "category": category,
                "amount": amount,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        changed_fields: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_UPDATED,
            expense_id=expense_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def expense_deleted(expense_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_DELETED,
            expense_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def collection_replaced(
        previous_count: int,
        new_count: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.COLLECTION_REPLACED,
            description=f"Collection replaced: {previous_count} -> {new_count} records",
            details={
                "previous_count": previous_count,
                "new_count": new_count,
            },
        )

    @staticmethod
    def collection_loaded(key: str, count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.COLLECTION_LOADED,
            severity=LedgerSeverity.DEBUG,
            description=f"Loaded {count} records from '{key}'",
            details={
                "key": key,
                "count": count,
            },
        )

    @staticmethod
    def persistence_read_failed(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_READ_FAILED,
            severity=LedgerSeverity.WARNING,
            description=f"Failed to parse storage slot '{key}', starting empty",
            details={
                "key": key,
            },
            error_message=error_message,
        )

    @staticmethod
    def persistence_repaired(
        key: str,
        dropped: int,
        defaulted_fields: dict[str, int],
        reassigned_ids: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_REPAIRED,
            severity=LedgerSeverity.WARNING,
            description=f"Repaired storage slot '{key}' ({dropped} records dropped)",
            details={
                "key": key,
                "dropped": dropped,
                "defaulted_fields": defaulted_fields,
                "reassigned_ids": reassigned_ids,
            },
        )

    @staticmethod
    def import_completed(
        accepted: int,
        dropped: int,
        defaulted_fields: dict[str, int],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_COMPLETED,
            description=f"Imported {accepted} records ({dropped} dropped)",
            details={
                "accepted": accepted,
                "dropped": dropped,
                "defaulted_fields": defaulted_fields,
            },
        )

    @staticmethod
    def import_rejected(error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.IMPORT_REJECTED,
            severity=LedgerSeverity.WARNING,
            description="Import rejected: payload is not a JSON array",
            error_message=error_message,
        )

    @staticmethod
    def export_generated(filename: str, count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPORT_GENERATED,
            description=f"Exported {count} records to {filename}",
            details={
                "filename": filename,
                "count": count,
            },
        )
