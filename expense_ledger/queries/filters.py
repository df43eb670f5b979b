"""
Filter Engine

Derives the displayed subset of the ledger from the full collection.
Pure: it never touches the store, and the same inputs always give
the same output.

Date boundaries are asymmetric. `date_from` starts at
00:00:00.000 of its day and `date_to` runs through 23:59:59.999 of
its day, so picking the same day for both captures every record on
that day even when stored dates carry a time component.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from typing import Any, Optional, Union

from expense_ledger.models.expense import ExpenseRecord, FilterCriteria


DAY_START = time(0, 0, 0, 0)
DAY_END = time(23, 59, 59, 999000)


def parse_record_date(value: Any) -> Optional[datetime]:
    """
    Parse a stored date at day granularity or finer.

    Accepts YYYY-MM-DD and ISO datetimes (optional fraction, `Z` or
    an offset). Offsets are dropped and the wall-clock time kept.
    Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, DAY_START)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _as_criteria(criteria: Union[FilterCriteria, Mapping, None]) -> FilterCriteria:
    if criteria is None:
        return FilterCriteria()
    if isinstance(criteria, FilterCriteria):
        return criteria
    return FilterCriteria.model_validate(dict(criteria))


def matches(record: ExpenseRecord, criteria: FilterCriteria) -> bool:
    """True if the record passes every active predicate."""
    text = criteria.text.lower()
    if text and text not in (record.description or "").lower():
        return False

    if criteria.category and record.category != criteria.category:
        return False

    if criteria.date_from or criteria.date_to:
        when = parse_record_date(record.date)
        # An undated record cannot be placed inside any range
        if when is None:
            return False
        if criteria.date_from and when < datetime.combine(criteria.date_from, DAY_START):
            return False
        if criteria.date_to and when > datetime.combine(criteria.date_to, DAY_END):
            return False

    return True


def _sort_key(record: ExpenseRecord) -> datetime:
    return parse_record_date(record.date) or datetime.min


def filter_expenses(
    records: Iterable[ExpenseRecord],
    criteria: Union[FilterCriteria, Mapping, None] = None,
) -> list[ExpenseRecord]:
    """
    Apply filter criteria and order by date, newest first.

    Records with equal dates keep their collection order; records
    with unparseable dates come last.
    """
    active = _as_criteria(criteria)
    selected = [record for record in records if matches(record, active)]
    return sorted(selected, key=_sort_key, reverse=True)
