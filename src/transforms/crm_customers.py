"""CRM customer master transform.

This module deduplicates staged customers by ``cst_id`` and maps the
surviving rows into curated customer records.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from core.errors import RecordRejectedError
from core.tables import CRM_CUSTOMERS
from core.types import CustomerRecord, RejectedRow, StagedRow, TransformResult
from transforms.deduplication import select_latest_per_key
from transforms.field_coercion import clean_text, int_or_reject, parse_calendar_date
from transforms.lookup_tables import normalize_gender, normalize_marital_status
from transforms.row_outcomes import apply_row_transform, reject_row


def transform_customers(rows: Iterable[StagedRow]) -> TransformResult[CustomerRecord]:
    """Deduplicate and curate staged customer rows.

    Args:
        rows: Staged ``crm_cust_info`` rows.

    Returns:
        One curated record per non-null customer id, ordered by id.
    """
    keyed_rows, rejected = _key_rows(rows)
    survivors = select_latest_per_key(keyed_rows, _create_date)
    records, transform_rejected = apply_row_transform(
        survivors,
        lambda pair: transform_customer(pair[1]),
        lambda pair: pair[1],
    )
    return TransformResult(
        table_name=CRM_CUSTOMERS,
        records=tuple(records),
        rejected=tuple(rejected + transform_rejected),
    )


def transform_customer(row: StagedRow) -> CustomerRecord:
    """Map one staged customer row to a curated record.

    Raises:
        RecordRejectedError: If the customer id is null or not an integer.
    """
    return CustomerRecord(
        customer_id=_customer_id(row),
        customer_key=clean_text(row.get("cst_key")),
        first_name=clean_text(row.get("cst_firstname")),
        last_name=clean_text(row.get("cst_lastname")),
        marital_status=normalize_marital_status(row.get("cst_marital_status")),
        gender=normalize_gender(row.get("cst_gndr")),
        create_date=_create_date(row),
    )


def _key_rows(rows: Iterable[StagedRow]) -> tuple[list[tuple[int, StagedRow]], list[RejectedRow]]:
    """Coerce business keys, rejecting null and malformed ids."""
    keyed: list[tuple[int, StagedRow]] = []
    rejected: list[RejectedRow] = []
    for row in rows:
        try:
            customer_id = _customer_id(row)
        except RecordRejectedError as error:
            rejected.append(reject_row(row, error))
            continue
        keyed.append((customer_id, row))
    return keyed, rejected


def _create_date(row: StagedRow) -> date | None:
    return parse_calendar_date(row.get("cst_create_date"))


def _customer_id(row: StagedRow) -> int:
    customer_id = int_or_reject(row, "cst_id")
    if customer_id is None:
        raise RecordRejectedError("null_business_key", "cst_id")
    return customer_id
