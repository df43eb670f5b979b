"""
Core Data Models for Expense Ledger

These models define the schemas for all data flowing through the ledger.
They are designed to:
1. Keep invalid amounts out of the collection
2. Provide clear validation error messages
3. Serialize to exactly the JSON shape that is persisted and exported

DESIGN DECISION: ExpenseRecord is frozen. The store replaces a record
object wholesale on edit, so nothing outside the store can mutate a
record it happens to hold.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def new_expense_id() -> str:
    """Generate a fresh opaque expense id."""
    return uuid4().hex


def _coerce_date_value(v: Any) -> Any:
    """Turn date/datetime objects into the ISO string the ledger stores."""
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    return v


def _require_calendar_date(v: Optional[str]) -> Optional[str]:
    """Dates typed in by a user must be plain YYYY-MM-DD."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        return v

    message = f"Date must be YYYY-MM-DD, got {v!r}"
    if not _ISO_DATE.fullmatch(v):
        raise ValueError(message)
    try:
        date.fromisoformat(v)
    except ValueError:
        raise ValueError(message) from None
    return v


def _reject_bool(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("Amount must be a number, not a boolean")
    return v


# =============================================================================
# RECORDS
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    One expense transaction.

    This is exactly what is persisted: the JSON slot holds a list of
    these, dumped field by field in declaration order.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique token, never reused"
    )
    date: str = Field(
        ...,
        min_length=1,
        description="ISO-8601 date (YYYY-MM-DD)"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category label"
    )
    description: str = Field(
        default="",
        description="Free text, may be empty"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive finite amount"
    )

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_date_value(v)

    @field_validator('amount', mode='before')
    @classmethod
    def reject_bool_amount(cls, v: Any) -> Any:
        return _reject_bool(v)


class ExpenseDraft(BaseModel):
    """
    Input for adding a new expense.

    Missing date and category are filled in by the store
    (today and the fallback category). The amount is kept raw
    here and validated by the store.
    """
    model_config = ConfigDict(extra="forbid")

    date: Optional[str] = None
    category: Optional[str] = None
    description: str = ""
    amount: Any = None

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_date_value(v)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return _require_calendar_date(v)

    @field_validator('description', mode='before')
    @classmethod
    def strip_description(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class ExpensePatch(BaseModel):
    """
    Partial update for an existing expense.

    None keeps the current value. An empty date or category also
    keeps the current value; an empty description clears it.
    The id can never be patched.
    """
    model_config = ConfigDict(extra="forbid")

    date: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    amount: Any = None

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_date_value(v)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return _require_calendar_date(v)

    def changes(self) -> dict[str, Any]:
        """Fields that actually change something, as a dict."""
        result: dict[str, Any] = {}
        if self.date:
            result["date"] = self.date
        if self.category:
            result["category"] = self.category
        if self.description is not None:
            result["description"] = self.description
        if self.amount is not None:
            result["amount"] = self.amount
        return result


# =============================================================================
# QUERY MODELS
# =============================================================================

class FilterCriteria(BaseModel):
    """
    Active predicates narrowing the displayed subset.

    Empty text/category and missing dates disable their predicate.
    The date bounds also accept the keys `from` and `to`.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="forbid",
    )

    text: str = ""
    category: str = ""
    date_from: Optional[date] = Field(default=None, alias="from")
    date_to: Optional[date] = Field(default=None, alias="to")

    @field_validator('text', 'category', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('date_from', 'date_to', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v == "":
            return None
        if isinstance(v, datetime):
            return v.date()
        return v

    @property
    def is_active(self) -> bool:
        """True if any predicate is enabled."""
        return bool(self.text or self.category or self.date_from or self.date_to)


class CategoryTotal(BaseModel):
    """Summed amount for one category."""

    category: str
    total: float


class LedgerSummary(BaseModel):
    """
    Aggregate statistics for one view of the ledger.

    filtered_total covers only the filtered records; everything
    else covers the whole collection.
    """

    filtered_total: float = 0.0
    month_total: float = 0.0
    top_category: Optional[CategoryTotal] = None
    entry_count: int = Field(default=0, ge=0)


# =============================================================================
# AMOUNT PARSING
# =============================================================================

class AmountOutcome(str, Enum):
    """How a raw amount was turned into a number."""
    OK = "ok"                # Present and numeric
    DEFAULTED = "defaulted"  # Missing or unparseable, replaced by 0


class ParsedAmount(BaseModel):
    """
    Result of parsing an untrusted amount.

    Both outcomes carry a usable value, so callers that only need a
    number can use .value, while callers that care can tell a real 0
    from a defaulted one.
    """
    model_config = ConfigDict(frozen=True)

    value: float
    outcome: AmountOutcome

    @classmethod
    def ok(cls, value: float) -> "ParsedAmount":
        return cls(value=value, outcome=AmountOutcome.OK)

    @classmethod
    def defaulted(cls) -> "ParsedAmount":
        return cls(value=0.0, outcome=AmountOutcome.DEFAULTED)

    @property
    def is_ok(self) -> bool:
        return self.outcome == AmountOutcome.OK


# =============================================================================
# IMPORT / EXPORT
# =============================================================================

class ImportReport(BaseModel):
    """Outcome of normalizing an imported array."""

    records: list[ExpenseRecord] = Field(default_factory=list)
    dropped: int = Field(
        default=0,
        ge=0,
        description="Elements removed because their amount was not positive"
    )
    defaulted_fields: dict[str, int] = Field(
        default_factory=dict,
        description="How many elements had each field repaired"
    )
    reassigned_ids: int = Field(
        default=0,
        ge=0,
        description="Repeated ids replaced with fresh ones"
    )

    @computed_field
    @property
    def accepted(self) -> int:
        return len(self.records)


class ExportPayload(BaseModel):
    """A ready-to-download export of the whole collection."""

    filename: str = "expenses.json"
    media_type: str = "application/json"
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")
