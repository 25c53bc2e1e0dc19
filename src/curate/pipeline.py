"""Curated load orchestration.

This module reads the current bronze snapshot, runs every entity
transform in sequence, and publishes the curated tables together with
their dead-letter rows as one silver snapshot. Failures are wrapped
with the entity and phase they happened in.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from core.config import SilverlineConfig
from core.constants import BRONZE_LAYER, SILVER_LAYER
from core.errors import SilverlineError, SilverlineLoadError
from core.logging_config import get_logger
from core.tables import (
    CRM_CUSTOMERS,
    CRM_PRODUCTS,
    CRM_SALES,
    ERP_CATEGORIES,
    ERP_DEMOGRAPHICS,
    ERP_LOCATIONS,
    TABLE_NAMES,
)
from core.types import (
    CuratedLoadResult,
    RejectedRow,
    SnapshotManifest,
    SnapshotWriteRequest,
    StagedRow,
    TablePayload,
    TransformResult,
)
from store.snapshot_store import SnapshotStore
from store.table_payload import payload_to_staged_rows, records_to_payload
from transforms.crm_customers import transform_customers
from transforms.crm_products import transform_products
from transforms.crm_sales import transform_sales
from transforms.erp_categories import transform_categories
from transforms.erp_demographics import transform_demographics
from transforms.erp_locations import transform_locations

_LOGGER = get_logger(__name__)

EntityTransform = Callable[[list[StagedRow], SilverlineConfig], TransformResult[Any]]

ENTITY_TRANSFORMS: Mapping[str, EntityTransform] = {
    CRM_CUSTOMERS: lambda rows, _config: transform_customers(rows),
    CRM_PRODUCTS: lambda rows, _config: transform_products(rows),
    CRM_SALES: lambda rows, _config: transform_sales(rows),
    ERP_DEMOGRAPHICS: lambda rows, config: transform_demographics(rows, config.reference_date),
    ERP_LOCATIONS: lambda rows, _config: transform_locations(rows),
    ERP_CATEGORIES: lambda rows, _config: transform_categories(rows),
}


@dataclass(frozen=True)
class StagingInput:
    """Bronze snapshot rows feeding one curated load."""

    manifest: SnapshotManifest
    rows: Mapping[str, list[StagedRow]]


class CuratedLoadRunner:
    """Runner for one full bronze-to-silver reload."""

    def __init__(self, config: SilverlineConfig) -> None:
        self._config = config
        self._store = SnapshotStore(config)

    def run(self) -> CuratedLoadResult:
        """Execute the curated load and return its summary."""
        started = time.perf_counter()
        staging = self._read_staging()
        results = [self._transform_entity(table_name, staging.rows[table_name]) for table_name in TABLE_NAMES]
        manifest = self._write_snapshot(staging.manifest.version_id, results)
        result = CuratedLoadResult(
            version_id=manifest.version_id,
            staging_version_id=staging.manifest.version_id,
            table_counts=dict(manifest.table_counts),
            rejected_counts={item.table_name: len(item.rejected) for item in results},
        )
        _LOGGER.info(
            "curated_loaded",
            version_id=result.version_id,
            staging_version_id=result.staging_version_id,
            table_counts=dict(result.table_counts),
            rejected_total=result.rejected_total,
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return result

    def _read_staging(self) -> StagingInput:
        try:
            manifest = self._store.current_version(BRONZE_LAYER)
            if manifest is None:
                raise SilverlineLoadError(
                    "*",
                    "read_staging",
                    "no bronze version exists. Run `silverline load-staging` first.",
                )
            _, tables = self._store.load_tables(BRONZE_LAYER, manifest.version_id)
            rows = {
                table_name: payload_to_staged_rows(table_name, tables.get(table_name, []))
                for table_name in TABLE_NAMES
            }
        except SilverlineLoadError:
            raise
        except SilverlineError as error:
            raise SilverlineLoadError("*", "read_staging", str(error)) from error
        return StagingInput(manifest=manifest, rows=rows)

    def _transform_entity(self, table_name: str, rows: list[StagedRow]) -> TransformResult[Any]:
        started = time.perf_counter()
        try:
            result = ENTITY_TRANSFORMS[table_name](rows, self._config)
        except Exception as error:
            raise SilverlineLoadError(
                table_name,
                "transform",
                f"{type(error).__name__}: {error}",
                context={"input_count": len(rows)},
            ) from error
        _LOGGER.info(
            "entity_transformed",
            table_name=table_name,
            input_count=len(rows),
            output_count=len(result.records),
            rejected_count=len(result.rejected),
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return result

    def _write_snapshot(
        self,
        staging_version_id: str,
        results: list[TransformResult[Any]],
    ) -> SnapshotManifest:
        tables: tuple[TablePayload, ...] = tuple(
            records_to_payload(result.table_name, result.records) for result in results
        )
        rejected: tuple[RejectedRow, ...] = tuple(row for result in results for row in result.rejected)
        request = SnapshotWriteRequest(
            layer=SILVER_LAYER,
            tables=tables,
            parent_version=staging_version_id,
            rejected=rejected,
        )
        try:
            return self._store.create_snapshot(request)
        except SilverlineError as error:
            raise SilverlineLoadError("*", "write", str(error)) from error


def load_curated(config: SilverlineConfig) -> CuratedLoadResult:
    """Run a full curated reload from the current bronze snapshot.

    Args:
        config: Runtime configuration.

    Returns:
        Created silver version summary.

    Raises:
        SilverlineLoadError: If reading, transforming, or writing fails.
    """
    return CuratedLoadRunner(config).run()
