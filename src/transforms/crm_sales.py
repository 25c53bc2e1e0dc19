"""CRM sales order line transform."""

from __future__ import annotations

from typing import Iterable

from core.tables import CRM_SALES
from core.types import SalesRecord, StagedRow, TransformResult
from transforms.consistency_repair import repair_sales_amounts
from transforms.field_coercion import (
    clean_text,
    int_or_none,
    int_or_reject,
    parse_integer_date,
    text_or_reject,
)
from transforms.row_outcomes import apply_row_transform

SALES_DATE_COLUMNS = ("sls_order_dt", "sls_ship_dt", "sls_due_dt")


def transform_sales(rows: Iterable[StagedRow]) -> TransformResult[SalesRecord]:
    """Curate staged sales lines in extract order.

    Args:
        rows: Staged ``crm_sales_details`` rows.

    Returns:
        Curated sales records and rejected rows.
    """
    records, rejected = apply_row_transform(rows, transform_sales_line, lambda row: row)
    return TransformResult(table_name=CRM_SALES, records=tuple(records), rejected=tuple(rejected))


def transform_sales_line(row: StagedRow) -> SalesRecord:
    """Map one staged sales line, repairing sales and price.

    Raises:
        RecordRejectedError: If the order number is missing or the
            customer id or quantity is not an integer.
    """
    order_number = text_or_reject(row, "sls_ord_num")
    customer_id = int_or_reject(row, "sls_cust_id")
    quantity = int_or_reject(row, "sls_quantity")
    amounts = repair_sales_amounts(
        sales=int_or_none(row.get("sls_sales")),
        quantity=quantity,
        price=int_or_none(row.get("sls_price")),
    )
    order_date, ship_date, due_date = (parse_integer_date(row.get(column)) for column in SALES_DATE_COLUMNS)
    return SalesRecord(
        order_number=order_number,
        product_key=clean_text(row.get("sls_prd_key")),
        customer_id=customer_id,
        order_date=order_date,
        ship_date=ship_date,
        due_date=due_date,
        sales=amounts.sales,
        quantity=quantity,
        price=amounts.price,
    )
