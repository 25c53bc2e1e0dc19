"""Fixed code-to-label lookup tables.

Every categorical mapping is an immutable table with an explicit
fallback, so the mappings can be audited and tested on their own.
Lookups trim and upper-case the raw code before matching.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from core.constants import NOT_AVAILABLE
from transforms.field_coercion import clean_text

MARITAL_STATUS_LABELS: Mapping[str, str] = MappingProxyType({"S": "Single", "M": "Married"})

GENDER_LABELS: Mapping[str, str] = MappingProxyType(
    {"F": "Female", "FEMALE": "Female", "M": "Male", "MALE": "Male"}
)

PRODUCT_LINE_LABELS: Mapping[str, str] = MappingProxyType(
    {"M": "Mountain", "R": "Road", "S": "Other Sales", "T": "Touring"}
)

COUNTRY_NAMES: Mapping[str, str] = MappingProxyType(
    {"DE": "Germany", "US": "United States", "USA": "United States"}
)

MARITAL_STATUS_VALUES = frozenset(MARITAL_STATUS_LABELS.values()) | {NOT_AVAILABLE}
GENDER_VALUES = frozenset(GENDER_LABELS.values()) | {NOT_AVAILABLE}
PRODUCT_LINE_VALUES = frozenset(PRODUCT_LINE_LABELS.values()) | {NOT_AVAILABLE}
MAINTENANCE_VALUES = frozenset({"Yes", "No"})


def map_code(
    table: Mapping[str, str],
    value: str | None,
    fallback: str = NOT_AVAILABLE,
) -> str:
    """Map a raw code through a lookup table.

    Args:
        table: Immutable code table keyed by upper-case code.
        value: Raw staged value.
        fallback: Label for null, blank, and unmapped codes.

    Returns:
        Mapped label or the fallback.
    """
    code = clean_text(value)
    if code is None:
        return fallback
    return table.get(code.upper(), fallback)


def normalize_marital_status(value: str | None) -> str:
    """Map a marital status code to Single/Married/n/a."""
    return map_code(MARITAL_STATUS_LABELS, value)


def normalize_gender(value: str | None) -> str:
    """Map a gender code or label to Female/Male/n/a."""
    return map_code(GENDER_LABELS, value)


def normalize_product_line(value: str | None) -> str:
    """Map a product line code to its descriptive name."""
    return map_code(PRODUCT_LINE_LABELS, value)


def normalize_country(value: str | None) -> str:
    """Expand a country code to its full name.

    Known codes expand through ``COUNTRY_NAMES``; blank or null becomes
    ``n/a``; any other value passes through trimmed.
    """
    country = clean_text(value)
    if country is None:
        return NOT_AVAILABLE
    return COUNTRY_NAMES.get(country.upper(), country)
