"""ERP customer demographic transform.

Customer ids lose their legacy ``NAS`` prefix so they join to the CRM
customer key; birthdates in the future relative to the load's reference
date are treated as unknown.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from core.constants import DEMOGRAPHIC_ID_PREFIX
from core.tables import ERP_DEMOGRAPHICS
from core.types import DemographicRecord, StagedRow, TransformResult
from transforms.field_coercion import clean_text, parse_calendar_date
from transforms.lookup_tables import normalize_gender
from transforms.row_outcomes import apply_row_transform


def transform_demographics(
    rows: Iterable[StagedRow],
    reference_date: date,
) -> TransformResult[DemographicRecord]:
    """Curate staged demographic rows.

    Args:
        rows: Staged ``erp_cust_az12`` rows.
        reference_date: Date treated as today for birthdate validation.

    Returns:
        Curated demographic records in extract order.
    """
    records, rejected = apply_row_transform(
        rows,
        lambda row: transform_demographic(row, reference_date),
        lambda row: row,
    )
    return TransformResult(
        table_name=ERP_DEMOGRAPHICS,
        records=tuple(records),
        rejected=tuple(rejected),
    )


def transform_demographic(row: StagedRow, reference_date: date) -> DemographicRecord:
    """Map one staged demographic row to a curated record."""
    return DemographicRecord(
        customer_id=strip_customer_prefix(row.get("cid")),
        birth_date=_birth_date(row.get("bdate"), reference_date),
        gender=normalize_gender(row.get("gen")),
    )


def strip_customer_prefix(value: str | None) -> str | None:
    """Trim an ERP customer id and drop a leading ``NAS`` prefix."""
    customer_id = clean_text(value)
    if customer_id is None or not customer_id.startswith(DEMOGRAPHIC_ID_PREFIX):
        return customer_id
    return customer_id[len(DEMOGRAPHIC_ID_PREFIX):] or None


def _birth_date(value: str | None, reference_date: date) -> date | None:
    birth_date = parse_calendar_date(value)
    if birth_date is None or birth_date > reference_date:
        return None
    return birth_date
