"""ERP product category transform.

Category rows are already clean in the source system and pass through
unchanged; the audit reports any leftover whitespace or drift.
"""

from __future__ import annotations

from typing import Iterable

from core.tables import ERP_CATEGORIES
from core.types import CategoryRecord, StagedRow, TransformResult
from transforms.row_outcomes import apply_row_transform


def transform_categories(rows: Iterable[StagedRow]) -> TransformResult[CategoryRecord]:
    """Curate staged category rows in extract order."""
    records, rejected = apply_row_transform(rows, transform_category, lambda row: row)
    return TransformResult(table_name=ERP_CATEGORIES, records=tuple(records), rejected=tuple(rejected))


def transform_category(row: StagedRow) -> CategoryRecord:
    return CategoryRecord(
        category_id=row.get("id"),
        category=row.get("cat"),
        subcategory=row.get("subcat"),
        maintenance=row.get("maintenance"),
    )
