"""Bronze and silver table schemas.

This module is the single description of every table the engine reads
or writes: column names, value kinds, record types, and business keys.
Staging validation, payload serialization, Lance schemas, and audit
identifiers all derive from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from core.constants import BRONZE_LAYER, LOAD_TIMESTAMP_COLUMN, SILVER_LAYER, SOURCE_ROW_COLUMN
from core.errors import SilverlineStoreError
from core.types import (
    CategoryRecord,
    CustomerRecord,
    DemographicRecord,
    LocationRecord,
    ProductRecord,
    SalesRecord,
)

ColumnKind = Literal["string", "integer", "date", "timestamp"]

CRM_CUSTOMERS = "crm_cust_info"
CRM_PRODUCTS = "crm_prd_info"
CRM_SALES = "crm_sales_details"
ERP_DEMOGRAPHICS = "erp_cust_az12"
ERP_LOCATIONS = "erp_loc_a101"
ERP_CATEGORIES = "erp_px_cat_g1v2"

TABLE_NAMES = (
    CRM_CUSTOMERS,
    CRM_PRODUCTS,
    CRM_SALES,
    ERP_DEMOGRAPHICS,
    ERP_LOCATIONS,
    ERP_CATEGORIES,
)


@dataclass(frozen=True)
class ColumnSpec:
    """One table column."""

    name: str
    kind: ColumnKind


@dataclass(frozen=True)
class TableSchema:
    """Column layout of one layer table.

    Attributes:
        name: Table identifier, shared by both layers.
        layer: Owning layer.
        columns: Ordered columns.
        key_columns: Columns identifying a curated row in audit findings.
        record_type: Curated dataclass for silver tables.
    """

    name: str
    layer: str
    columns: tuple[ColumnSpec, ...]
    key_columns: tuple[str, ...] = ()
    record_type: type | None = None

    @property
    def column_names(self) -> tuple[str, ...]:
        """Ordered column names."""
        return tuple(column.name for column in self.columns)

    @property
    def value_columns(self) -> tuple[str, ...]:
        """Column names carrying table content, without bookkeeping columns."""
        return tuple(name for name in self.column_names if name not in _BOOKKEEPING_COLUMNS)


def _strings(*names: str) -> tuple[ColumnSpec, ...]:
    return tuple(ColumnSpec(name, "string") for name in names)


def _staged(*names: str) -> tuple[ColumnSpec, ...]:
    return (*_strings(*names), _SOURCE_ROW)


_LOADED_AT = ColumnSpec(LOAD_TIMESTAMP_COLUMN, "timestamp")
_SOURCE_ROW = ColumnSpec(SOURCE_ROW_COLUMN, "integer")
_BOOKKEEPING_COLUMNS = (LOAD_TIMESTAMP_COLUMN, SOURCE_ROW_COLUMN)

_BRONZE_SCHEMAS = (
    TableSchema(
        CRM_CUSTOMERS,
        BRONZE_LAYER,
        _staged(
            "cst_id",
            "cst_key",
            "cst_firstname",
            "cst_lastname",
            "cst_marital_status",
            "cst_gndr",
            "cst_create_date",
        ),
    ),
    TableSchema(
        CRM_PRODUCTS,
        BRONZE_LAYER,
        _staged("prd_id", "prd_key", "prd_nm", "prd_cost", "prd_line", "prd_start_dt", "prd_end_dt"),
    ),
    TableSchema(
        CRM_SALES,
        BRONZE_LAYER,
        _staged(
            "sls_ord_num",
            "sls_prd_key",
            "sls_cust_id",
            "sls_order_dt",
            "sls_ship_dt",
            "sls_due_dt",
            "sls_sales",
            "sls_quantity",
            "sls_price",
        ),
    ),
    TableSchema(ERP_DEMOGRAPHICS, BRONZE_LAYER, _staged("cid", "bdate", "gen")),
    TableSchema(ERP_LOCATIONS, BRONZE_LAYER, _staged("cid", "cntry")),
    TableSchema(ERP_CATEGORIES, BRONZE_LAYER, _staged("id", "cat", "subcat", "maintenance")),
)

_SILVER_SCHEMAS = (
    TableSchema(
        CRM_CUSTOMERS,
        SILVER_LAYER,
        (
            ColumnSpec("customer_id", "integer"),
            ColumnSpec("customer_key", "string"),
            ColumnSpec("first_name", "string"),
            ColumnSpec("last_name", "string"),
            ColumnSpec("marital_status", "string"),
            ColumnSpec("gender", "string"),
            ColumnSpec("create_date", "date"),
            _LOADED_AT,
        ),
        ("customer_id",),
        CustomerRecord,
    ),
    TableSchema(
        CRM_PRODUCTS,
        SILVER_LAYER,
        (
            ColumnSpec("product_id", "integer"),
            ColumnSpec("category_id", "string"),
            ColumnSpec("product_key", "string"),
            ColumnSpec("product_name", "string"),
            ColumnSpec("product_cost", "integer"),
            ColumnSpec("product_line", "string"),
            ColumnSpec("start_date", "date"),
            ColumnSpec("end_date", "date"),
            _LOADED_AT,
        ),
        ("product_id",),
        ProductRecord,
    ),
    TableSchema(
        CRM_SALES,
        SILVER_LAYER,
        (
            ColumnSpec("order_number", "string"),
            ColumnSpec("product_key", "string"),
            ColumnSpec("customer_id", "integer"),
            ColumnSpec("order_date", "date"),
            ColumnSpec("ship_date", "date"),
            ColumnSpec("due_date", "date"),
            ColumnSpec("sales", "integer"),
            ColumnSpec("quantity", "integer"),
            ColumnSpec("price", "integer"),
            _LOADED_AT,
        ),
        ("order_number", "product_key", "customer_id"),
        SalesRecord,
    ),
    TableSchema(
        ERP_DEMOGRAPHICS,
        SILVER_LAYER,
        (
            ColumnSpec("customer_id", "string"),
            ColumnSpec("birth_date", "date"),
            ColumnSpec("gender", "string"),
            _LOADED_AT,
        ),
        ("customer_id",),
        DemographicRecord,
    ),
    TableSchema(
        ERP_LOCATIONS,
        SILVER_LAYER,
        (ColumnSpec("customer_id", "string"), ColumnSpec("country", "string"), _LOADED_AT),
        ("customer_id",),
        LocationRecord,
    ),
    TableSchema(
        ERP_CATEGORIES,
        SILVER_LAYER,
        (*_strings("category_id", "category", "subcategory", "maintenance"), _LOADED_AT),
        ("category_id",),
        CategoryRecord,
    ),
)

_SCHEMAS = {(schema.layer, schema.name): schema for schema in _BRONZE_SCHEMAS + _SILVER_SCHEMAS}


def get_table_schema(layer: str, table_name: str) -> TableSchema:
    """Look up one table schema.

    Args:
        layer: Layer name.
        table_name: Table identifier.

    Returns:
        Matching schema.

    Raises:
        SilverlineStoreError: If the table is unknown for the layer.
    """
    schema = _SCHEMAS.get((layer, table_name))
    if schema is None:
        raise SilverlineStoreError(
            f"Unknown table '{table_name}' for layer '{layer}'. "
            f"Known tables: {', '.join(TABLE_NAMES)}."
        )
    return schema


def staging_schema(table_name: str) -> TableSchema:
    """Return the bronze schema for a table."""
    return get_table_schema(BRONZE_LAYER, table_name)


def curated_schema(table_name: str) -> TableSchema:
    """Return the silver schema for a table."""
    return get_table_schema(SILVER_LAYER, table_name)
