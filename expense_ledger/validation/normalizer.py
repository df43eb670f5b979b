"""
Import Normalization

DESIGN DECISION: An import is judged element by element.
A single bad element never rejects the whole file:

- Missing fields are repaired with defaults (fresh id, today,
  the fallback category, empty description)
- Elements whose amount is not a positive number are dropped
- Only a payload that is not an array at all is refused

The normalized list then REPLACES the collection; it is never
merged with what was there before.
"""

from collections import Counter
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Optional

from expense_ledger.categories import CategoryRegistry
from expense_ledger.errors import FormatError
from expense_ledger.models.expense import ExpenseRecord, ImportReport, new_expense_id
from expense_ledger.validation.amounts import parse_amount


def _fresh_id(id_factory: Callable[[], str], taken: set[str]) -> str:
    expense_id = id_factory()
    while expense_id in taken:
        expense_id = id_factory()
    return expense_id


def normalize_with_report(
    raw: Any,
    registry: CategoryRegistry,
    *,
    id_factory: Callable[[], str] = new_expense_id,
    today: Optional[date] = None,
    fallback_category: str = "Other",
) -> ImportReport:
    """
    Repair, default and filter an untrusted array of expense objects.

    Args:
        raw: Decoded JSON payload
        registry: Receives every category of the surviving records
        id_factory: Source of fresh ids
        today: Date used for elements without one (defaults to today)
        fallback_category: Category for elements without one

    Returns:
        ImportReport with the accepted records and repair counts

    Raises:
        FormatError: If raw is not a list
    """
    if not isinstance(raw, (list, tuple)):
        raise FormatError()

    today_iso = (today or date.today()).isoformat()
    defaulted: Counter = Counter()
    records: list[ExpenseRecord] = []
    seen_ids: set[str] = set()
    dropped = 0
    reassigned = 0

    for element in raw:
        # Non-objects have no fields; they end up with amount 0 and are dropped
        item = element if isinstance(element, Mapping) else {}

        expense_id = item.get("id")
        if not expense_id:
            expense_id = _fresh_id(id_factory, seen_ids)
            defaulted["id"] += 1
        else:
            expense_id = str(expense_id)

        expense_date = item.get("date")
        if not expense_date:
            expense_date = today_iso
            defaulted["date"] += 1

        category = item.get("category")
        if not category:
            category = fallback_category
            defaulted["category"] += 1

        description = item.get("description")
        if description is None:
            description = ""
            defaulted["description"] += 1

        parsed = parse_amount(item.get("amount"))
        if not parsed.is_ok:
            defaulted["amount"] += 1

        if parsed.value <= 0:
            dropped += 1
            continue

        if expense_id in seen_ids:
            expense_id = _fresh_id(id_factory, seen_ids)
            reassigned += 1
        seen_ids.add(expense_id)

        records.append(ExpenseRecord(
            id=expense_id,
            date=str(expense_date),
            category=str(category),
            description=str(description),
            amount=parsed.value,
        ))

    for record in records:
        registry.ensure(record.category)

    return ImportReport(
        records=records,
        dropped=dropped,
        defaulted_fields=dict(defaulted),
        reassigned_ids=reassigned,
    )


def normalize(
    raw: Any,
    registry: CategoryRegistry,
    **kwargs: Any,
) -> list[ExpenseRecord]:
    """Same as normalize_with_report, returning only the accepted records."""
    return normalize_with_report(raw, registry, **kwargs).records
