"""
Aggregation Engine

DESIGN DECISION: Every statistic is recomputed from scratch on
every call. There is no cached or incremental state to drift out
of sync with the collection.

Scopes differ on purpose:
- filtered total: only the records the active filter selected
- month total, top category, entry count: the WHOLE collection,
  whatever the filter says

Amounts are read through parse_amount, so a missing or non-numeric
amount counts as 0 instead of failing the whole summary.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional

from expense_ledger.models.expense import CategoryTotal, LedgerSummary
from expense_ledger.queries.filters import parse_record_date
from expense_ledger.validation.amounts import parse_amount


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _amount_of(record: Any) -> float:
    return parse_amount(_field(record, "amount")).value


def month_start(now: datetime) -> datetime:
    """Midnight on the first day of now's calendar month."""
    return datetime(now.year, now.month, 1)


def filtered_total(filtered: Iterable[Any]) -> float:
    """Sum of amounts over an already filtered sequence."""
    return sum((_amount_of(record) for record in filtered), 0.0)


def month_to_date_total(
    records: Iterable[Any],
    now: Optional[datetime] = None,
) -> float:
    """
    Sum of amounts dated on or after the first day of the current month.

    There is no upper bound: records dated later in the month, or in
    the future, are included.
    """
    start = month_start(now or datetime.now())
    total = 0.0
    for record in records:
        when = parse_record_date(_field(record, "date"))
        if when is not None and when >= start:
            total += _amount_of(record)
    return total


def category_totals(records: Iterable[Any]) -> dict[str, float]:
    """Summed amount per category, in first-seen order."""
    totals: dict[str, float] = {}
    for record in records:
        category = _field(record, "category")
        totals[category] = totals.get(category, 0.0) + _amount_of(record)
    return totals


def top_category(records: Iterable[Any]) -> Optional[CategoryTotal]:
    """
    Category with the greatest summed amount.

    Ties go to the category that was seen first: a later category
    must be strictly greater to displace it. Returns None when no
    category sums above 0 (including an empty collection).
    """
    top_name = None
    top_value = 0.0
    for name, value in category_totals(records).items():
        if value > top_value:
            top_name, top_value = name, value

    if top_name is None:
        return None
    return CategoryTotal(category=str(top_name), total=top_value)


def summarize(
    records: Iterable[Any],
    filtered: Iterable[Any],
    now: Optional[datetime] = None,
) -> LedgerSummary:
    """
    Compute every summary statistic for one view.

    Args:
        records: The full, unfiltered collection
        filtered: The filter engine's result for the current criteria
        now: Current time; defaults to the wall clock
    """
    records = list(records)
    return LedgerSummary(
        filtered_total=filtered_total(filtered),
        month_total=month_to_date_total(records, now),
        top_category=top_category(records),
        entry_count=len(records),
    )
