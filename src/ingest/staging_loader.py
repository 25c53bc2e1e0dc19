"""Staging load orchestration.

This module reads every CRM and ERP extract named by the source layout
and persists them together as one bronze snapshot.
"""

from __future__ import annotations

import time
from pathlib import Path

from core.config import SilverlineConfig
from core.constants import BRONZE_LAYER
from core.errors import SilverlineStagingError
from core.logging_config import get_logger
from core.source_layout import SourceLayout, default_source_layout
from core.tables import TABLE_NAMES
from core.types import SnapshotWriteRequest, StagingLoadResult, TablePayload
from ingest.staging_reader import read_staging_table
from store.snapshot_store import SnapshotStore
from store.table_payload import staged_rows_to_payload

_LOGGER = get_logger(__name__)


def load_staging(
    source_dir: str | Path,
    config: SilverlineConfig,
    layout: SourceLayout | None = None,
) -> StagingLoadResult:
    """Run a full staging reload from CSV extracts.

    Args:
        source_dir: Directory holding the source extracts.
        config: Runtime configuration.
        layout: Optional source layout; the default CRM/ERP layout when omitted.

    Returns:
        Created bronze version id and row counts.

    Raises:
        SilverlineStagingError: If an extract is missing or malformed.
        SilverlineStoreError: If snapshot persistence fails.
    """
    source_root = Path(source_dir).expanduser().resolve()
    if not source_root.is_dir():
        raise SilverlineStagingError(
            f"Source directory does not exist at {source_root}. "
            "Provide the folder holding the CRM and ERP extracts."
        )
    table_paths = (layout or default_source_layout()).resolve(source_root)
    started = time.perf_counter()
    tables = tuple(_read_table(table_name, table_paths[table_name]) for table_name in TABLE_NAMES)
    store = SnapshotStore(config)
    manifest = store.create_snapshot(SnapshotWriteRequest(layer=BRONZE_LAYER, tables=tables))
    _LOGGER.info(
        "staging_loaded",
        source_dir=str(source_root),
        version_id=manifest.version_id,
        table_counts=dict(manifest.table_counts),
        duration_seconds=round(time.perf_counter() - started, 3),
    )
    return StagingLoadResult(version_id=manifest.version_id, table_counts=manifest.table_counts)


def _read_table(table_name: str, csv_path: Path) -> TablePayload:
    started = time.perf_counter()
    rows = read_staging_table(table_name, csv_path)
    _LOGGER.info(
        "staging_table_read",
        table_name=table_name,
        path=str(csv_path),
        row_count=len(rows),
        duration_seconds=round(time.perf_counter() - started, 3),
    )
    return staged_rows_to_payload(table_name, rows)
