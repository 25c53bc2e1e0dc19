"""Unit tests for field coercion helpers."""

from __future__ import annotations

from datetime import date

import pytest

from core.errors import RecordRejectedError
from tests.staged_rows import staged_row
from transforms.field_coercion import (
    clean_text,
    int_or_none,
    int_or_reject,
    parse_calendar_date,
    parse_cost,
    parse_integer_date,
    text_or_reject,
)


def test_clean_text_trims_and_nulls_blank_values() -> None:
    """Blank text should become null after trimming."""
    assert (clean_text("  Jon "), clean_text("   "), clean_text(None)) == ("Jon", None, None)


def test_int_or_none_fails_open_for_malformed_text() -> None:
    """Descriptive integers should fall back to null when malformed."""
    assert (int_or_none(" 42 "), int_or_none("4.2"), int_or_none("")) == (42, None, None)


def test_int_or_reject_rejects_malformed_identifier() -> None:
    """Identifying integers should reject the row when malformed."""
    row = staged_row("crm_cust_info", cst_id="abc")

    with pytest.raises(RecordRejectedError) as error_info:
        int_or_reject(row, "cst_id")

    assert error_info.value.reason == "invalid_integer" and error_info.value.column == "cst_id"


def test_text_or_reject_rejects_blank_value() -> None:
    """Required text columns should reject blank values."""
    row = staged_row("crm_sales_details", sls_ord_num="   ")

    with pytest.raises(RecordRejectedError) as error_info:
        text_or_reject(row, "sls_ord_num")

    assert error_info.value.reason == "missing_required_value"


@pytest.mark.parametrize(
    ("raw_value", "expected"),
    [(None, 0), ("", 0), ("12", 12), ("13.5", 14), ("12.49", 12), ("-3", 0), ("NaN", 0), ("abc", 0)],
)
def test_parse_cost_rounds_and_defaults(raw_value: str | None, expected: int) -> None:
    """Costs should round half up and default to zero when unusable."""
    assert parse_cost(raw_value) == expected


def test_parse_calendar_date_accepts_time_suffix() -> None:
    """Dates with a time component should keep the date part."""
    assert parse_calendar_date("2003-07-01 00:00:00") == date(2003, 7, 1)


def test_parse_calendar_date_returns_none_for_garbage() -> None:
    """Malformed dates should coerce to null."""
    assert (parse_calendar_date("07/01/2003"), parse_calendar_date("2003-07-01x")) == (None, None)


@pytest.mark.parametrize(
    ("raw_value", "expected"),
    [
        ("20101229", date(2010, 12, 29)),
        ("0", None),
        ("201012", None),
        ("18991231", None),
        ("20500102", None),
        ("20100230", None),
        ("2010122x", None),
        (None, None),
    ],
)
def test_parse_integer_date_applies_all_rules(raw_value: str | None, expected: date | None) -> None:
    """Integer dates should be eight digits, in range, and real days."""
    assert parse_integer_date(raw_value) == expected


def test_int_or_reject_rejects_identifier_beyond_64_bits() -> None:
    """Identifying integers that overflow a 64-bit column should reject the row."""
    row = staged_row("crm_cust_info", cst_id="99999999999999999999")

    with pytest.raises(RecordRejectedError) as error_info:
        int_or_reject(row, "cst_id")

    assert error_info.value.reason == "invalid_integer"


def test_int_or_none_nulls_values_beyond_64_bits() -> None:
    """Descriptive integers should fail open when they overflow 64 bits."""
    assert (int_or_none("9223372036854775807"), int_or_none("9223372036854775808")) == (
        9223372036854775807,
        None,
    )


def test_parse_cost_defaults_out_of_range_costs() -> None:
    """Costs too large to store should fall back to the default cost."""
    assert (parse_cost("1e30"), parse_cost("9223372036854775808"), parse_cost("1e2")) == (0, 0, 100)
