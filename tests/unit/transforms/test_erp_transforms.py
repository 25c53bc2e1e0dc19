"""Unit tests for ERP demographic, location, and category transforms."""

from __future__ import annotations

from datetime import date

from tests.staged_rows import staged_row
from transforms.erp_categories import transform_categories
from transforms.erp_demographics import strip_customer_prefix, transform_demographics
from transforms.erp_locations import strip_non_alphanumeric, transform_locations

REFERENCE_DATE = date(2025, 1, 1)


def test_strip_customer_prefix_removes_legacy_prefix() -> None:
    """Only a leading NAS prefix should be removed."""
    values = [strip_customer_prefix(value) for value in ("NASAW00011000", " AW00011001 ", "AWNAS1", None)]

    assert values == ["AW00011000", "AW00011001", "AWNAS1", None]


def test_transform_demographics_nulls_future_birthdates() -> None:
    """Birthdates after the reference date should become null."""
    rows = [
        staged_row("erp_cust_az12", 1, cid="NASAW1", bdate="2099-01-01", gen=" Female "),
        staged_row("erp_cust_az12", 2, cid="AW2", bdate="1971-10-06", gen=None),
    ]

    records = transform_demographics(rows, REFERENCE_DATE).records

    assert [(record.customer_id, record.birth_date, record.gender) for record in records] == [
        ("AW1", None, "Female"),
        ("AW2", date(1971, 10, 6), "n/a"),
    ]


def test_strip_non_alphanumeric_compacts_ids() -> None:
    """Every non-alphanumeric character should be removed."""
    assert (strip_non_alphanumeric("AW-000_11 000"), strip_non_alphanumeric("--")) == ("AW00011000", None)


def test_transform_locations_expands_countries() -> None:
    """Country codes should expand and blanks become n/a."""
    rows = [
        staged_row("erp_loc_a101", 1, cid="AW-1", cntry="DE"),
        staged_row("erp_loc_a101", 2, cid="AW-2", cntry=None),
    ]

    records = transform_locations(rows).records

    assert [(record.customer_id, record.country) for record in records] == [("AW1", "Germany"), ("AW2", "n/a")]


def test_transform_categories_passes_rows_through() -> None:
    """Category rows should be copied without changes."""
    rows = [staged_row("erp_px_cat_g1v2", 1, id="AC_BR", cat="Accessories", subcat="Bike Racks", maintenance="Yes")]

    record = transform_categories(rows).records[0]

    assert (record.category_id, record.category, record.subcategory, record.maintenance) == (
        "AC_BR",
        "Accessories",
        "Bike Racks",
        "Yes",
    )
