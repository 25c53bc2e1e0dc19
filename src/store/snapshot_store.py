"""Layer snapshot store and catalog.

This module persists immutable bronze and silver versions with lineage
metadata. Every version is written to a shadow directory first and only
becomes visible after it is renamed into place and the layer catalog is
atomically swapped to point at it. A failed load therefore leaves the
previous current version untouched.
"""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

from core.config import SilverlineConfig
from core.constants import (
    CATALOG_FILE_NAME,
    LANCE_DIR_SUFFIX,
    LAYERS_DIR_NAME,
    LOAD_TIMESTAMP_COLUMN,
    REJECTED_FILE_NAME,
    SHADOW_DIR_PREFIX,
    SUPPORTED_LAYERS,
    TABLE_FILE_SUFFIX,
    TABLES_DIR_NAME,
    VERSIONS_DIR_NAME,
)
from core.errors import SilverlineError, SilverlineStoreError
from core.logging_config import get_logger
from core.s3_uri import parse_s3_uri
from core.tables import get_table_schema
from core.types import (
    RejectedRow,
    SnapshotManifest,
    SnapshotWriteRequest,
    TablePayload,
    VersionExportRequest,
)
from store.catalog_io import (
    build_version_id,
    compute_content_digest,
    manifest_from_dict,
    prune_catalog,
    read_catalog_file,
    with_manifest,
    write_catalog_file,
    write_manifest_file,
)
from store.s3_export import create_s3_client, upload_directory
from store.table_payload import (
    canonical_row_text,
    read_jsonl,
    rejected_from_payload,
    rejected_to_payload,
    write_jsonl,
    write_lance_table,
)

_LOGGER = get_logger(__name__)


class SnapshotStore:
    """Versioned layer store.

    This class owns layer directories, version manifests, and the
    current-version pointer of every layer catalog.
    """

    def __init__(self, config: SilverlineConfig) -> None:
        """Initialize snapshot store from config.

        Args:
            config: Runtime configuration.
        """
        self._config = config
        self._layers_root = config.data_root / LAYERS_DIR_NAME
        self._layers_root.mkdir(parents=True, exist_ok=True)

    @property
    def data_root(self) -> Path:
        """Return the configured data root."""
        return self._config.data_root

    def create_snapshot(self, request: SnapshotWriteRequest) -> SnapshotManifest:
        """Create a new immutable layer version and make it current.

        Args:
            request: Snapshot write request payload.

        Returns:
            Persisted snapshot manifest.

        Raises:
            SilverlineStoreError: If persistence or the catalog swap fails.
        """
        layer_root = self._layer_root(request.layer)
        created_at = datetime.now(timezone.utc)
        content_digest = compute_content_digest(
            (table.table_name, (canonical_row_text(row) for row in table.rows))
            for table in request.tables
        )
        version_id = build_version_id(request.layer, created_at, content_digest)
        versions_root = layer_root / VERSIONS_DIR_NAME
        shadow_dir = versions_root / f"{SHADOW_DIR_PREFIX}{version_id}"
        version_dir = versions_root / version_id
        renamed = False
        try:
            lance_tables = self._write_version_files(shadow_dir, request, created_at)
            manifest = SnapshotManifest(
                layer=request.layer,
                version_id=version_id,
                created_at=created_at,
                parent_version=request.parent_version,
                table_counts={table.table_name: len(table.rows) for table in request.tables},
                rejected_count=len(request.rejected),
                content_digest=content_digest,
                lance_tables=lance_tables,
            )
            write_manifest_file(shadow_dir, manifest)
            shadow_dir.rename(version_dir)
            renamed = True
            catalog_path = layer_root / CATALOG_FILE_NAME
            catalog, expired_versions = prune_catalog(
                with_manifest(read_catalog_file(catalog_path), manifest),
                self._config.retain_versions,
            )
            write_catalog_file(catalog_path, catalog)
        except Exception as error:
            shutil.rmtree(version_dir if renamed else shadow_dir, ignore_errors=True)
            _LOGGER.error(
                "snapshot_swap_failed",
                layer=request.layer,
                version_id=version_id,
                error=str(error),
            )
            if isinstance(error, SilverlineError):
                raise
            raise SilverlineStoreError(
                f"Failed to write {request.layer} snapshot {version_id}: {error}. "
                "The previous current version is unchanged; fix the cause and rerun the load."
            ) from error
        _LOGGER.info(
            "snapshot_created",
            layer=request.layer,
            version_id=version_id,
            parent_version=request.parent_version,
            table_counts=dict(manifest.table_counts),
            rejected_count=manifest.rejected_count,
            lance_tables=list(lance_tables),
        )
        self._remove_expired_versions(request.layer, versions_root, expired_versions)
        return manifest

    def list_versions(self, layer: str) -> list[SnapshotManifest]:
        """List manifests for a layer sorted by creation time.

        Args:
            layer: Layer name.

        Returns:
            Ordered manifest list, empty when the layer has no versions.
        """
        catalog = read_catalog_file(self._layer_root(layer) / CATALOG_FILE_NAME)
        version_payloads = cast(list[dict[str, Any]], catalog["versions"])
        versions = [manifest_from_dict(item) for item in version_payloads]
        return sorted(versions, key=lambda item: item.created_at)

    def current_version(self, layer: str) -> SnapshotManifest | None:
        """Return the manifest the layer catalog points at, if any."""
        catalog = read_catalog_file(self._layer_root(layer) / CATALOG_FILE_NAME)
        current_id = catalog.get("current_version")
        if not current_id:
            return None
        return self.resolve_manifest(layer, str(current_id))

    def resolve_manifest(self, layer: str, version_id: str | None = None) -> SnapshotManifest:
        """Resolve a target manifest.

        Args:
            layer: Layer name.
            version_id: Optional version id; current version when omitted.

        Returns:
            Resolved snapshot manifest.

        Raises:
            SilverlineStoreError: If the layer is empty or the version is unknown.
        """
        if version_id is None:
            current = self.current_version(layer)
            if current is None:
                raise SilverlineStoreError(
                    f"No versions exist for layer '{layer}'. "
                    "Run a load before reading snapshots."
                )
            return current
        for manifest in self.list_versions(layer):
            if manifest.version_id == version_id:
                return manifest
        raise SilverlineStoreError(
            f"Version '{version_id}' not found for layer '{layer}'. "
            "Use `silverline versions` to discover valid version ids."
        )

    def load_tables(
        self,
        layer: str,
        version_id: str | None = None,
    ) -> tuple[SnapshotManifest, dict[str, list[dict[str, Any]]]]:
        """Load every table payload of a version.

        Args:
            layer: Layer name.
            version_id: Optional version id; current version when omitted.

        Returns:
            Pair of manifest and payload rows keyed by table name.
        """
        manifest = self.resolve_manifest(layer, version_id)
        tables_dir = self.version_dir(layer, manifest.version_id) / TABLES_DIR_NAME
        tables = {
            table_name: read_jsonl(tables_dir / f"{table_name}{TABLE_FILE_SUFFIX}")
            for table_name in manifest.table_counts
        }
        return manifest, tables

    def load_rejected(self, layer: str, version_id: str | None = None) -> list[RejectedRow]:
        """Load the dead-letter rows persisted with a version."""
        manifest = self.resolve_manifest(layer, version_id)
        rejected_path = self.version_dir(layer, manifest.version_id) / REJECTED_FILE_NAME
        return [rejected_from_payload(row) for row in read_jsonl(rejected_path)]

    def export_version_to_s3(self, request: VersionExportRequest) -> int:
        """Export a version directory to S3.

        Args:
            request: Export request payload.

        Returns:
            Number of uploaded files.

        Raises:
            SilverlineStoreError: If the URI is invalid or an upload fails.
        """
        location = parse_s3_uri(request.output_uri)
        version_dir = self.version_dir(request.layer, request.version_id)
        s3_client = create_s3_client(self._config)
        uploaded = upload_directory(s3_client, version_dir, location.bucket, location.prefix)
        _LOGGER.info(
            "snapshot_exported",
            layer=request.layer,
            version_id=request.version_id,
            output_uri=request.output_uri,
            file_count=uploaded,
        )
        return uploaded

    def version_dir(self, layer: str, version_id: str) -> Path:
        """Return a committed version directory.

        Raises:
            SilverlineStoreError: If the version directory is missing.
        """
        version_dir = self._layer_root(layer) / VERSIONS_DIR_NAME / version_id
        if version_id.startswith(SHADOW_DIR_PREFIX) or not version_dir.is_dir():
            raise SilverlineStoreError(
                f"Missing snapshot directory for {layer}:{version_id} at {version_dir}. "
                "Recreate the snapshot before loading or exporting."
            )
        return version_dir

    def _layer_root(self, layer: str) -> Path:
        """Return layer root path and ensure base directories.

        Raises:
            SilverlineStoreError: If the layer name is unsupported.
        """
        if layer not in SUPPORTED_LAYERS:
            raise SilverlineStoreError(
                f"Unsupported layer '{layer}'. Use one of: {', '.join(SUPPORTED_LAYERS)}."
            )
        layer_root = self._layers_root / layer
        (layer_root / VERSIONS_DIR_NAME).mkdir(parents=True, exist_ok=True)
        return layer_root

    def _remove_expired_versions(self, layer: str, versions_root: Path, version_ids: list[str]) -> None:
        """Delete version directories the catalog no longer lists."""
        for version_id in version_ids:
            shutil.rmtree(versions_root / version_id, ignore_errors=True)
        if version_ids:
            _LOGGER.info("snapshot_pruned", layer=layer, version_ids=version_ids)

    def _write_version_files(
        self,
        version_dir: Path,
        request: SnapshotWriteRequest,
        created_at: datetime,
    ) -> tuple[str, ...]:
        """Write tables, Lance mirrors, and dead-letter rows of one version.

        Returns:
            Names of tables mirrored into Lance datasets.
        """
        tables_dir = version_dir / TABLES_DIR_NAME
        tables_dir.mkdir(parents=True, exist_ok=False)
        lance_tables: list[str] = []
        for table in request.tables:
            schema = get_table_schema(request.layer, table.table_name)
            rows = _stamp_rows(table, schema.column_names, created_at)
            write_jsonl(tables_dir / f"{table.table_name}{TABLE_FILE_SUFFIX}", rows)
            if self._config.columnar_export and rows:
                write_lance_table(tables_dir / f"{table.table_name}{LANCE_DIR_SUFFIX}", schema, rows)
                lance_tables.append(table.table_name)
        write_jsonl(
            version_dir / REJECTED_FILE_NAME,
            [rejected_to_payload(row) for row in request.rejected],
        )
        return tuple(lance_tables)


def _stamp_rows(
    table: TablePayload,
    column_names: tuple[str, ...],
    created_at: datetime,
) -> list[dict[str, object]]:
    """Attach the batch load timestamp to tables that carry one."""
    if LOAD_TIMESTAMP_COLUMN not in column_names:
        return [dict(row) for row in table.rows]
    loaded_at = created_at.isoformat()
    return [{**row, LOAD_TIMESTAMP_COLUMN: loaded_at} for row in table.rows]
