"""Unit tests for the CRM product transform."""

from __future__ import annotations

from datetime import date

import pytest

from core.errors import RecordRejectedError
from tests.staged_rows import staged_row
from transforms.crm_products import split_product_key, transform_products


def _product(row_number: int, prd_id: str, prd_key: str | None, start: str | None, **values: str | None):
    return staged_row(
        "crm_prd_info",
        row_number,
        prd_id=prd_id,
        prd_key=prd_key,
        prd_start_dt=start,
        **values,
    )


def test_split_product_key_derives_category_and_product_key() -> None:
    """Composite keys should split into category id and product key."""
    assert split_product_key("CO-RF-FR-R92B-58") == ("CO_RF", "FR-R92B-58")


def test_split_product_key_rejects_short_keys() -> None:
    """Keys without a product part should reject the row."""
    with pytest.raises(RecordRejectedError) as error_info:
        split_product_key("BK-R")

    assert error_info.value.reason == "product_key_too_short"


def test_transform_products_normalizes_cost_and_line() -> None:
    """Cost should default and round, product line should expand."""
    rows = [
        _product(1, "210", " CO-RF-FR-R92B-58 ", "2003-07-01", prd_cost=None, prd_line="R "),
        _product(2, "211", "AC-HE-HL-U509-R", "2003-07-01", prd_cost="13.5", prd_line="x"),
    ]

    records = transform_products(rows).records

    assert [(record.product_cost, record.product_line) for record in records] == [
        (14, "n/a"),
        (0, "Road"),
    ]


def test_transform_products_infers_end_date_from_next_version() -> None:
    """Each version should end the day before the next one starts."""
    rows = [
        _product(1, "214", "AC-HE-HL-U509-R", "2013-07-01"),
        _product(2, "212", "AC-HE-HL-U509-R", "2011-07-01"),
        _product(3, "213", "AC-HE-HL-U509-R", "2012-07-01"),
    ]

    records = transform_products(rows).records

    assert [(record.product_id, record.end_date) for record in records] == [
        (212, date(2012, 6, 30)),
        (213, date(2013, 6, 30)),
        (214, None),
    ]


def test_transform_products_orders_missing_start_dates_last() -> None:
    """Versions without a start date should sort last and end nothing."""
    rows = [
        _product(1, "301", "AC-HE-HL-U509-R", None),
        _product(2, "300", "AC-HE-HL-U509-R", "2012-07-01"),
    ]

    records = transform_products(rows).records

    assert [(record.product_id, record.end_date) for record in records] == [(300, None), (301, None)]


def test_transform_products_rejects_unusable_rows() -> None:
    """Missing keys, short keys, and malformed ids should be rejected."""
    rows = [
        _product(1, "215", "BK-R", "2013-07-01"),
        _product(2, "216", None, "2013-07-01"),
        _product(3, "x1", "AC-HE-HL-U509-R", "2013-07-01"),
        _product(4, "217", "AC-HE-HL-U509-R", "2013-07-01"),
    ]

    result = transform_products(rows)

    assert [record.product_id for record in result.records] == [217] and [
        row.row_number for row in result.rejected
    ] == [1, 2, 3]


def test_transform_products_defaults_oversized_cost() -> None:
    """A cost too large to round should default instead of failing the batch."""
    rows = [
        _product(1, "220", "AC-HE-HL-U509-R", "2011-07-01", prd_cost="10"),
        _product(2, "221", "AC-HE-HL-U509-R", "2012-07-01", prd_cost="1e30"),
    ]

    result = transform_products(rows)

    assert [record.product_cost for record in result.records] == [10, 0] and result.rejected == ()


def test_transform_products_leaves_earliest_calendar_day_open() -> None:
    """A successor starting on the first representable day should give no end date."""
    rows = [
        _product(1, "230", "AC-HE-HL-U509-R", "0001-01-01"),
        _product(2, "231", "AC-HE-HL-U509-R", "0001-01-01"),
    ]

    records = transform_products(rows).records

    assert [(record.product_id, record.end_date) for record in records] == [(230, None), (231, None)]
