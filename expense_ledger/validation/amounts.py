"""
Amount Parsing

Amounts arrive from forms, prompts and imported files as numbers,
numeric strings or junk. parse_amount never fails: it either
parses a finite number or reports that it fell back to 0.
"""

import math
from decimal import Decimal
from typing import Any

from expense_ledger.errors import ValidationError
from expense_ledger.models.expense import ParsedAmount


INVALID_AMOUNT_MESSAGE = "Please enter a valid amount greater than 0."


def parse_amount(value: Any) -> ParsedAmount:
    """
    Parse an untrusted amount.

    int, float, Decimal and numeric strings (surrounding whitespace
    allowed) are OK. Everything else, including booleans, empty
    strings, NaN and infinities, is DEFAULTED to 0.
    """
    if isinstance(value, bool):
        return ParsedAmount.defaulted()

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return ParsedAmount.defaulted()
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ParsedAmount.defaulted()
        try:
            number = float(text)
        except ValueError:
            return ParsedAmount.defaulted()
    else:
        return ParsedAmount.defaulted()

    if not math.isfinite(number):
        return ParsedAmount.defaulted()
    return ParsedAmount.ok(number)


def require_valid_amount(value: Any) -> float:
    """
    Parse an amount supplied by a direct user action.

    Raises:
        ValidationError: unless the amount is a finite number > 0
    """
    parsed = parse_amount(value)
    if not parsed.is_ok or parsed.value <= 0:
        raise ValidationError(INVALID_AMOUNT_MESSAGE)
    return parsed.value
