"""Audit check implementations for curated snapshots.

Each check is read-only and returns the findings it produced; an empty
list means the rule holds for the whole snapshot.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable

from core.audit_types import AuditContext, AuditFinding
from core.constants import MIN_BIRTH_DATE
from core.tables import (
    curated_schema,
    CRM_CUSTOMERS,
    CRM_PRODUCTS,
    CRM_SALES,
    ERP_CATEGORIES,
    ERP_DEMOGRAPHICS,
    ERP_LOCATIONS,
)
from transforms.crm_sales import SALES_DATE_COLUMNS
from transforms.field_coercion import is_valid_integer_date
from transforms.lookup_tables import (
    COUNTRY_NAMES,
    GENDER_VALUES,
    MAINTENANCE_VALUES,
    MARITAL_STATUS_VALUES,
    PRODUCT_LINE_VALUES,
)

CheckCallable = Callable[[AuditContext], list[AuditFinding]]
CheckRow = tuple[str, str, str, CheckCallable]


def build_checks() -> tuple[CheckRow, ...]:
    """Build the ordered audit check list as ``(id, title, rule, fn)`` rows."""
    return (
        ("A001", "Primary Key Uniqueness", "primary_key", check_primary_keys),
        ("A002", "Trimmed Text", "untrimmed_text", check_untrimmed_text),
        ("A003", "Categorical Standardization", "categorical_drift", check_categorical_drift),
        ("A004", "Product Cost Range", "cost_range", check_cost_range),
        ("A005", "Birthdate Range", "birthdate_range", check_birthdate_range),
        ("A006", "Date Ordering", "date_order", check_date_order),
        ("A007", "Sales Consistency", "sales_consistency", check_sales_consistency),
        ("A008", "Staging Integer Dates", "staging_integer_date", check_staging_integer_dates),
    )


def check_primary_keys(context: AuditContext) -> list[AuditFinding]:
    """Flag null or duplicate customer and product ids."""
    findings: list[AuditFinding] = []
    for entity, rows in ((CRM_CUSTOMERS, context.customers), (CRM_PRODUCTS, context.products)):
        (column,) = curated_schema(entity).key_columns
        findings.extend(_key_findings(entity, column, [getattr(row, column) for row in rows]))
    return findings


def check_untrimmed_text(context: AuditContext) -> list[AuditFinding]:
    """Flag text values with leading or trailing whitespace."""
    findings: list[AuditFinding] = []
    for row in context.customers:
        row_id = _row_id(CRM_CUSTOMERS, row)
        for column in ("customer_key", "first_name", "last_name"):
            findings.extend(_untrimmed(CRM_CUSTOMERS, row_id, column, getattr(row, column)))
    for row in context.products:
        findings.extend(
            _untrimmed(CRM_PRODUCTS, _row_id(CRM_PRODUCTS, row), "product_name", row.product_name)
        )
    for row in context.categories:
        row_id = _row_id(ERP_CATEGORIES, row)
        for column in ("category_id", "category", "subcategory", "maintenance"):
            findings.extend(_untrimmed(ERP_CATEGORIES, row_id, column, getattr(row, column)))
    for row in context.locations:
        findings.extend(_untrimmed(ERP_LOCATIONS, _row_id(ERP_LOCATIONS, row), "country", row.country))
    return findings


def check_categorical_drift(context: AuditContext) -> list[AuditFinding]:
    """Flag categorical values outside their standardized label sets."""
    findings: list[AuditFinding] = []
    for row in context.customers:
        row_id = _row_id(CRM_CUSTOMERS, row)
        findings.extend(_outside(CRM_CUSTOMERS, row_id, "marital_status", row.marital_status, MARITAL_STATUS_VALUES))
        findings.extend(_outside(CRM_CUSTOMERS, row_id, "gender", row.gender, GENDER_VALUES))
    for row in context.demographics:
        findings.extend(
            _outside(ERP_DEMOGRAPHICS, _row_id(ERP_DEMOGRAPHICS, row), "gender", row.gender, GENDER_VALUES)
        )
    for row in context.products:
        findings.extend(
            _outside(
                CRM_PRODUCTS,
                _row_id(CRM_PRODUCTS, row),
                "product_line",
                row.product_line,
                PRODUCT_LINE_VALUES,
            )
        )
    for row in context.categories:
        findings.extend(
            _outside(
                ERP_CATEGORIES,
                _row_id(ERP_CATEGORIES, row),
                "maintenance",
                row.maintenance,
                MAINTENANCE_VALUES,
            )
        )
    for row in context.locations:
        country = row.country
        if not country or not country.strip() or country.strip().upper() in COUNTRY_NAMES:
            findings.append(
                AuditFinding(
                    entity=ERP_LOCATIONS,
                    rule="categorical_drift",
                    row_identifier=_row_id(ERP_LOCATIONS, row),
                    detail=f"country is blank or an unexpanded code: {country!r}",
                )
            )
    return findings


def check_cost_range(context: AuditContext) -> list[AuditFinding]:
    """Flag null or negative product costs."""
    return [
        AuditFinding(
            entity=CRM_PRODUCTS,
            rule="cost_range",
            row_identifier=_row_id(CRM_PRODUCTS, row),
            detail=f"product_cost is null or negative: {row.product_cost!r}",
        )
        for row in context.products
        if row.product_cost is None or row.product_cost < 0
    ]


def check_birthdate_range(context: AuditContext) -> list[AuditFinding]:
    """Flag birthdates before 1924-01-01 or after the reference date."""
    findings: list[AuditFinding] = []
    for row in context.demographics:
        birth_date = row.birth_date
        if birth_date is None:
            continue
        if birth_date < MIN_BIRTH_DATE or birth_date > context.reference_date:
            findings.append(
                AuditFinding(
                    entity=ERP_DEMOGRAPHICS,
                    rule="birthdate_range",
                    row_identifier=_row_id(ERP_DEMOGRAPHICS, row),
                    detail=(
                        f"birth_date {birth_date.isoformat()} outside "
                        f"[{MIN_BIRTH_DATE.isoformat()}, {context.reference_date.isoformat()}]"
                    ),
                )
            )
    return findings


def check_date_order(context: AuditContext) -> list[AuditFinding]:
    """Flag product windows ending before they start and late sales orders."""
    findings: list[AuditFinding] = []
    for row in context.products:
        if row.start_date and row.end_date and row.end_date < row.start_date:
            findings.append(
                AuditFinding(
                    entity=CRM_PRODUCTS,
                    rule="date_order",
                    row_identifier=_row_id(CRM_PRODUCTS, row),
                    detail=f"end_date {row.end_date} precedes start_date {row.start_date}",
                )
            )
    for row in context.sales:
        for column in ("ship_date", "due_date"):
            other = getattr(row, column)
            if row.order_date and other and row.order_date > other:
                findings.append(
                    AuditFinding(
                        entity=CRM_SALES,
                        rule="date_order",
                        row_identifier=_row_id(CRM_SALES, row),
                        detail=f"order_date {row.order_date} is after {column} {other}",
                    )
                )
    return findings


def check_sales_consistency(context: AuditContext) -> list[AuditFinding]:
    """Flag sales lines where sales differs from quantity times price."""
    findings: list[AuditFinding] = []
    for row in context.sales:
        amounts = (row.sales, row.quantity, row.price)
        if any(value is None or value <= 0 for value in amounts):
            detail = f"non-positive or missing amount: sales={row.sales} quantity={row.quantity} price={row.price}"
        elif row.sales != row.quantity * row.price:
            detail = f"sales {row.sales} != quantity {row.quantity} * price {row.price}"
        else:
            continue
        findings.append(
            AuditFinding(entity=CRM_SALES, rule="sales_consistency", row_identifier=_row_id(CRM_SALES, row), detail=detail)
        )
    return findings


def check_staging_integer_dates(context: AuditContext) -> list[AuditFinding]:
    """Flag staged sales dates that are not valid ``YYYYMMDD`` integers."""
    findings: list[AuditFinding] = []
    for row in context.staged_sales:
        for column in SALES_DATE_COLUMNS:
            value = row.get(column)
            if value is None or is_valid_integer_date(value):
                continue
            findings.append(
                AuditFinding(
                    entity=CRM_SALES,
                    rule="staging_integer_date",
                    row_identifier=f"row={row.row_number}",
                    detail=f"{column} is not a valid integer date: {value!r}",
                )
            )
    return findings


def _key_findings(entity: str, column: str, keys: Iterable[object]) -> list[AuditFinding]:
    key_list = list(keys)
    counts = Counter(key for key in key_list if key is not None)
    findings = [
        AuditFinding(entity, "primary_key", f"{column}={key}", f"{column} appears {count} times")
        for key, count in sorted(counts.items(), key=lambda item: str(item[0]))
        if count > 1
    ]
    null_count = sum(1 for key in key_list if key is None)
    if null_count:
        findings.append(
            AuditFinding(entity, "primary_key", f"{column}=null", f"{null_count} rows have a null {column}")
        )
    return findings


def _untrimmed(entity: str, row_id: str, column: str, value: str | None) -> list[AuditFinding]:
    if value is None or value == value.strip():
        return []
    return [AuditFinding(entity, "untrimmed_text", row_id, f"{column} has surrounding whitespace: {value!r}")]


def _outside(
    entity: str,
    row_id: str,
    column: str,
    value: str | None,
    allowed: frozenset[str],
) -> list[AuditFinding]:
    if value in allowed:
        return []
    return [AuditFinding(entity, "categorical_drift", row_id, f"{column} has unexpected value {value!r}")]


def _row_id(entity: str, row: object) -> str:
    """Render the business key of a curated row as ``column=value`` pairs."""
    return ",".join(f"{column}={getattr(row, column)}" for column in curated_schema(entity).key_columns)
