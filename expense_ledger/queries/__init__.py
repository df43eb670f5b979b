"""Filtering and aggregation package."""

from expense_ledger.queries.aggregator import (
    category_totals,
    filtered_total,
    month_start,
    month_to_date_total,
    summarize,
    top_category,
)
from expense_ledger.queries.filters import (
    filter_expenses,
    matches,
    parse_record_date,
)

__all__ = [
    "category_totals",
    "filter_expenses",
    "filtered_total",
    "matches",
    "month_start",
    "month_to_date_total",
    "parse_record_date",
    "summarize",
    "top_category",
]
