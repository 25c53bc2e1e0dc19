"""Shared typed models.

This module defines immutable data models used by staging, transforms,
store, audit, and SDK layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Generic, Mapping, TypeVar

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class StagedRow:
    """Loosely typed bronze row as read from a source extract.

    Attributes:
        table_name: Bronze table the row belongs to.
        row_number: One-based data row number in the source extract.
        values: Raw text values keyed by source column; nulls are ``None``.
    """

    table_name: str
    row_number: int
    values: Mapping[str, str | None]

    def get(self, column: str) -> str | None:
        """Return the raw value for one column, ``None`` when absent."""
        return self.values.get(column)


@dataclass(frozen=True)
class CustomerRecord:
    """Curated CRM customer master row."""

    customer_id: int
    customer_key: str | None
    first_name: str | None
    last_name: str | None
    marital_status: str
    gender: str
    create_date: date | None


@dataclass(frozen=True)
class ProductRecord:
    """Curated CRM product row with derived category and validity window."""

    product_id: int | None
    category_id: str
    product_key: str
    product_name: str | None
    product_cost: int
    product_line: str
    start_date: date | None
    end_date: date | None


@dataclass(frozen=True)
class SalesRecord:
    """Curated CRM sales order line."""

    order_number: str
    product_key: str | None
    customer_id: int | None
    order_date: date | None
    ship_date: date | None
    due_date: date | None
    sales: int | None
    quantity: int | None
    price: int | None


@dataclass(frozen=True)
class DemographicRecord:
    """Curated ERP customer demographic row."""

    customer_id: str | None
    birth_date: date | None
    gender: str


@dataclass(frozen=True)
class LocationRecord:
    """Curated ERP customer location row."""

    customer_id: str | None
    country: str


@dataclass(frozen=True)
class CategoryRecord:
    """Curated ERP product category row."""

    category_id: str | None
    category: str | None
    subcategory: str | None
    maintenance: str | None


@dataclass(frozen=True)
class RejectedRow:
    """Dead-letter entry for a staged row excluded from curated output.

    Attributes:
        table_name: Source table of the rejected row.
        row_number: One-based data row number in the source extract.
        reason: Short rejection reason.
        values: Raw values of the rejected row.
    """

    table_name: str
    row_number: int
    reason: str
    values: Mapping[str, str | None]


@dataclass(frozen=True)
class TransformResult(Generic[RecordT]):
    """Outcome of transforming one staged table.

    Attributes:
        table_name: Table that was transformed.
        records: Curated records in canonical order.
        rejected: Rows excluded from curated output.
    """

    table_name: str
    records: tuple[RecordT, ...]
    rejected: tuple[RejectedRow, ...] = ()


@dataclass(frozen=True)
class TablePayload:
    """JSON-safe rows for one table inside a snapshot.

    Attributes:
        table_name: Table identifier.
        rows: Serialized rows in canonical order.
    """

    table_name: str
    rows: tuple[Mapping[str, object], ...]


@dataclass(frozen=True)
class SnapshotManifest:
    """Immutable snapshot metadata for one layer version.

    Attributes:
        layer: Layer name, ``bronze`` or ``silver``.
        version_id: Immutable snapshot id.
        created_at: UTC creation and load timestamp.
        parent_version: Upstream version this snapshot was derived from.
        table_counts: Row count per table.
        rejected_count: Number of dead-letter rows.
        content_digest: Digest over table rows excluding load timestamps.
        lance_tables: Tables also persisted as Lance datasets.
    """

    layer: str
    version_id: str
    created_at: datetime
    parent_version: str | None
    table_counts: Mapping[str, int]
    rejected_count: int
    content_digest: str
    lance_tables: tuple[str, ...] = ()


@dataclass(frozen=True)
class SnapshotWriteRequest:
    """Snapshot creation request.

    Attributes:
        layer: Target layer name.
        tables: Table payloads to persist together.
        parent_version: Upstream version id.
        rejected: Dead-letter rows to persist next to the tables.
    """

    layer: str
    tables: tuple[TablePayload, ...]
    parent_version: str | None = None
    rejected: tuple[RejectedRow, ...] = ()


@dataclass(frozen=True)
class VersionExportRequest:
    """Request model for exporting one layer version to S3."""

    layer: str
    version_id: str
    output_uri: str


@dataclass(frozen=True)
class StagingLoadResult:
    """Summary of one staging load."""

    version_id: str
    table_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CuratedLoadResult:
    """Summary of one curated load.

    Attributes:
        version_id: Created silver version id.
        staging_version_id: Bronze version the load read from.
        table_counts: Curated row count per table.
        rejected_counts: Rejected row count per table.
    """

    version_id: str
    staging_version_id: str
    table_counts: Mapping[str, int] = field(default_factory=dict)
    rejected_counts: Mapping[str, int] = field(default_factory=dict)

    @property
    def rejected_total(self) -> int:
        """Total rejected rows across all tables."""
        return sum(self.rejected_counts.values())
