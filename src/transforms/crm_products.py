"""CRM product transform.

This module splits composite product keys into category and product
parts, normalizes cost and product line, and infers each version's end
date from the next version of the same key.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable

from core.constants import (
    CATEGORY_ID_SEPARATOR,
    PRODUCT_CATEGORY_PREFIX_LENGTH,
    PRODUCT_KEY_SEPARATOR,
    PRODUCT_KEY_SUFFIX_OFFSET,
)
from core.errors import RecordRejectedError
from core.tables import CRM_PRODUCTS
from core.types import ProductRecord, StagedRow, TransformResult
from transforms.field_coercion import (
    clean_text,
    int_or_reject,
    parse_calendar_date,
    parse_cost,
    text_or_reject,
)
from transforms.lookup_tables import normalize_product_line
from transforms.row_outcomes import apply_row_transform


@dataclass(frozen=True)
class _ProductVersion:
    """Curated product row still waiting for its end date."""

    source_key: str
    row_number: int
    record: ProductRecord


def transform_products(rows: Iterable[StagedRow]) -> TransformResult[ProductRecord]:
    """Curate staged product rows.

    Args:
        rows: Staged ``crm_prd_info`` rows.

    Returns:
        Curated records grouped by source key in start-date order.
    """
    versions, rejected = apply_row_transform(rows, _build_version, lambda row: row)
    records = assign_end_dates(versions)
    return TransformResult(table_name=CRM_PRODUCTS, records=tuple(records), rejected=tuple(rejected))


def split_product_key(source_key: str) -> tuple[str, str]:
    """Split a composite product key into category id and product key.

    Args:
        source_key: Trimmed composite key such as ``AB-CD-123``.

    Returns:
        Pair of category id (``AB_CD``) and product key (``123``).

    Raises:
        RecordRejectedError: If the key has no product part after the prefix.
    """
    product_key = source_key[PRODUCT_KEY_SUFFIX_OFFSET:]
    if not product_key:
        raise RecordRejectedError(
            "product_key_too_short",
            "prd_key",
            f"expected more than {PRODUCT_KEY_SUFFIX_OFFSET} characters, got {source_key!r}",
        )
    category_id = source_key[:PRODUCT_CATEGORY_PREFIX_LENGTH].replace(
        PRODUCT_KEY_SEPARATOR, CATEGORY_ID_SEPARATOR
    )
    return category_id, product_key


def assign_end_dates(versions: Iterable[_ProductVersion]) -> list[ProductRecord]:
    """Set each version's end date from its successor's start date.

    Versions are grouped by source key and ordered by start date, with
    missing start dates last. Each end date is the next start date minus
    one day; the last version of a key has no end date.
    """
    groups: dict[str, list[_ProductVersion]] = defaultdict(list)
    for version in versions:
        groups[version.source_key].append(version)
    records: list[ProductRecord] = []
    for source_key in sorted(groups):
        ordered = sorted(groups[source_key], key=_version_order)
        successors = [*ordered[1:], None]
        for version, successor in zip(ordered, successors):
            records.append(replace(version.record, end_date=_end_date(successor)))
    return records


def _build_version(row: StagedRow) -> _ProductVersion:
    product_id = int_or_reject(row, "prd_id")
    source_key = text_or_reject(row, "prd_key")
    category_id, product_key = split_product_key(source_key)
    record = ProductRecord(
        product_id=product_id,
        category_id=category_id,
        product_key=product_key,
        product_name=clean_text(row.get("prd_nm")),
        product_cost=parse_cost(row.get("prd_cost")),
        product_line=normalize_product_line(row.get("prd_line")),
        start_date=parse_calendar_date(row.get("prd_start_dt")),
        end_date=None,
    )
    return _ProductVersion(source_key=source_key, row_number=row.row_number, record=record)


def _version_order(version: _ProductVersion) -> tuple[bool, date, bool, int, int]:
    record = version.record
    return (
        record.start_date is None,
        record.start_date or date.min,
        record.product_id is None,
        record.product_id or 0,
        version.row_number,
    )


def _end_date(successor: _ProductVersion | None) -> date | None:
    if successor is None or successor.record.start_date in (None, date.min):
        return None
    return successor.record.start_date - timedelta(days=1)
