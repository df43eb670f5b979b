"""Validation and import normalization package."""

from expense_ledger.validation.amounts import (
    INVALID_AMOUNT_MESSAGE,
    parse_amount,
    require_valid_amount,
)
from expense_ledger.validation.normalizer import normalize, normalize_with_report

__all__ = [
    "INVALID_AMOUNT_MESSAGE",
    "normalize",
    "normalize_with_report",
    "parse_amount",
    "require_valid_amount",
]
