"""Field coercion helpers for loosely typed staged values.

Staged values are text or null. Helpers here either fail open to a
default (descriptive fields) or raise ``RecordRejectedError`` when the
value identifies the row and cannot be coerced.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.constants import (
    DEFAULT_PRODUCT_COST,
    INTEGER_DATE_DIGITS,
    MAX_INTEGER_DATE,
    MAX_STORED_INTEGER,
    MIN_INTEGER_DATE,
    MIN_STORED_INTEGER,
)
from core.errors import RecordRejectedError
from core.types import StagedRow

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_DATE_TIME_SEPARATORS = (" ", "T")


def clean_text(value: str | None) -> str | None:
    """Trim a text value; blank text becomes ``None``."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def parse_int(value: str | None) -> int | None:
    """Parse an integer value.

    Args:
        value: Raw text value.

    Returns:
        Parsed integer, or ``None`` for null/blank input.

    Raises:
        ValueError: If the text is not an integer literal or does not
            fit a signed 64-bit column.
    """
    text = clean_text(value)
    if text is None:
        return None
    if not _INTEGER_PATTERN.fullmatch(text):
        raise ValueError(f"not an integer literal: {text!r}")
    number = int(text)
    if not fits_stored_integer(number):
        raise ValueError(f"integer out of 64-bit range: {text!r}")
    return number


def fits_stored_integer(number: int) -> bool:
    """Return whether an integer fits a signed 64-bit column."""
    return MIN_STORED_INTEGER <= number <= MAX_STORED_INTEGER


def int_or_none(value: str | None) -> int | None:
    """Parse an integer, failing open to ``None``."""
    try:
        return parse_int(value)
    except ValueError:
        return None


def int_or_reject(row: StagedRow, column: str) -> int | None:
    """Parse an identifying integer column or reject the row.

    Null stays ``None``; unparseable text rejects the row.

    Raises:
        RecordRejectedError: If the value is not an integer literal.
    """
    try:
        return parse_int(row.get(column))
    except ValueError as error:
        raise RecordRejectedError("invalid_integer", column, str(error)) from error


def text_or_reject(row: StagedRow, column: str) -> str:
    """Return a required trimmed text column or reject the row.

    Raises:
        RecordRejectedError: If the value is null or blank.
    """
    text = clean_text(row.get(column))
    if text is None:
        raise RecordRejectedError("missing_required_value", column)
    return text


def parse_cost(value: str | None) -> int:
    """Coerce a product cost to a non-negative integer.

    Decimal costs round half away from zero. Null, unparseable,
    non-finite, negative, and out-of-range costs become
    ``DEFAULT_PRODUCT_COST``.
    """
    text = clean_text(value)
    if text is None:
        return DEFAULT_PRODUCT_COST
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return DEFAULT_PRODUCT_COST
    if not amount.is_finite() or amount < 0 or amount > MAX_STORED_INTEGER:
        return DEFAULT_PRODUCT_COST
    try:
        cost = int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return DEFAULT_PRODUCT_COST
    return cost if fits_stored_integer(cost) else DEFAULT_PRODUCT_COST


def parse_calendar_date(value: str | None) -> date | None:
    """Parse an ISO date, optionally followed by a time part.

    Returns:
        Parsed date, or ``None`` when the value is null or malformed.
    """
    text = clean_text(value)
    if text is None:
        return None
    date_part = text[:10]
    if len(text) > 10 and text[10] not in _DATE_TIME_SEPARATORS:
        return None
    try:
        return date.fromisoformat(date_part)
    except ValueError:
        return None


def parse_integer_date(value: str | None) -> date | None:
    """Convert a ``YYYYMMDD`` integer-encoded date.

    The value must be exactly eight digits, non-zero, inside
    ``[MIN_INTEGER_DATE, MAX_INTEGER_DATE]``, and a real calendar day.
    Anything else maps to ``None``.
    """
    text = clean_text(value)
    if text is None or len(text) != INTEGER_DATE_DIGITS:
        return None
    if not (text.isascii() and text.isdigit()):
        return None
    numeric = int(text)
    if numeric == 0 or not MIN_INTEGER_DATE <= numeric <= MAX_INTEGER_DATE:
        return None
    try:
        return datetime.strptime(text, "%Y%m%d").date()
    except ValueError:
        return None


def is_valid_integer_date(value: str | None) -> bool:
    """Return whether a raw value passes the integer-date rules."""
    return parse_integer_date(value) is not None
