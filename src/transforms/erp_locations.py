"""ERP customer location transform."""

from __future__ import annotations

from typing import Iterable

from core.tables import ERP_LOCATIONS
from core.types import LocationRecord, StagedRow, TransformResult
from transforms.field_coercion import clean_text
from transforms.lookup_tables import normalize_country
from transforms.row_outcomes import apply_row_transform


def transform_locations(rows: Iterable[StagedRow]) -> TransformResult[LocationRecord]:
    """Curate staged location rows in extract order."""
    records, rejected = apply_row_transform(rows, transform_location, lambda row: row)
    return TransformResult(table_name=ERP_LOCATIONS, records=tuple(records), rejected=tuple(rejected))


def transform_location(row: StagedRow) -> LocationRecord:
    """Map one staged location row to a curated record."""
    return LocationRecord(
        customer_id=strip_non_alphanumeric(row.get("cid")),
        country=normalize_country(row.get("cntry")),
    )


def strip_non_alphanumeric(value: str | None) -> str | None:
    """Remove every non-alphanumeric character from an id.

    Args:
        value: Raw id such as ``AW-00011000``.

    Returns:
        Compacted id (``AW00011000``), or ``None`` when nothing remains.
    """
    text = clean_text(value)
    if text is None:
        return None
    return "".join(char for char in text if char.isalnum()) or None
