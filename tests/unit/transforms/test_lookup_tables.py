"""Unit tests for code-to-label lookup tables."""

from __future__ import annotations

import pytest

from transforms.lookup_tables import (
    GENDER_LABELS,
    normalize_country,
    normalize_gender,
    normalize_marital_status,
    normalize_product_line,
)


def test_gender_lookup_accepts_codes_and_labels() -> None:
    """CRM codes and ERP labels should map to the same gender labels."""
    values = [normalize_gender(value) for value in ("f", " FEMALE ", "M", "male", "x", None)]

    assert values == ["Female", "Female", "Male", "Male", "n/a", "n/a"]


def test_marital_status_falls_back_to_not_available() -> None:
    """Unknown marital status codes should map to n/a."""
    assert (normalize_marital_status(" s "), normalize_marital_status("D")) == ("Single", "n/a")


def test_product_line_maps_every_code() -> None:
    """All product line codes should expand to descriptive names."""
    values = [normalize_product_line(code) for code in ("M", "R ", "s", "T", "Z")]

    assert values == ["Mountain", "Road", "Other Sales", "Touring", "n/a"]


def test_country_expands_codes_and_passes_through_names() -> None:
    """Known codes expand, blanks become n/a, other names pass through trimmed."""
    values = [normalize_country(value) for value in ("DE", "USA", "US", "  ", None, " Australia ")]

    assert values == ["Germany", "United States", "United States", "n/a", "n/a", "Australia"]


def test_lookup_tables_are_read_only() -> None:
    """Lookup tables should reject mutation."""
    with pytest.raises(TypeError):
        GENDER_LABELS["X"] = "Other"  # type: ignore[index]

    assert "X" not in GENDER_LABELS
