"""Python SDK for warehouse operations.

This module exposes high-level APIs for staging and curated loads,
audits, version inspection, and exports backed by the snapshot store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.audit import run_audit, save_audit_report
from core.audit_types import AuditReport
from core.config import SilverlineConfig
from core.constants import SILVER_LAYER
from core.source_layout import load_source_layout
from core.types import (
    CuratedLoadResult,
    RejectedRow,
    SnapshotManifest,
    StagingLoadResult,
    VersionExportRequest,
)
from curate.pipeline import load_curated
from ingest.staging_loader import load_staging
from store.snapshot_store import SnapshotStore
from store.table_payload import payload_to_records


class SilverlineClient:
    """Primary SDK entry point for bronze-to-silver workflows."""

    def __init__(self, config: SilverlineConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or SilverlineConfig.from_env()
        self._store = SnapshotStore(self._config)

    @property
    def config(self) -> SilverlineConfig:
        """Return the runtime configuration."""
        return self._config

    def load_staging(self, source_dir: str, layout_path: str | None = None) -> StagingLoadResult:
        """Reload the bronze layer from CSV extracts.

        Args:
            source_dir: Directory holding the CRM and ERP extracts.
            layout_path: Optional YAML source layout file.

        Returns:
            Created bronze version summary.

        Raises:
            SilverlineConfigError: If the layout file is invalid.
            SilverlineStagingError: If an extract is missing or malformed.
        """
        layout = load_source_layout(layout_path)
        return load_staging(source_dir, self._config, layout)

    def load_curated(self) -> CuratedLoadResult:
        """Reload the silver layer from the current bronze version.

        Raises:
            SilverlineLoadError: If reading, transforming, or writing fails.
        """
        return load_curated(self._config)

    def audit(self, version_id: str | None = None) -> AuditReport:
        """Audit a silver version.

        Args:
            version_id: Optional silver version id; current when omitted.

        Returns:
            Structured audit report.

        Raises:
            SilverlineAuditError: If the version cannot be loaded.
        """
        return run_audit(self._store, self._config.reference_date, version_id)

    def save_audit_report(self, report: AuditReport) -> Path:
        """Persist an audit report under the audits directory of the data root."""
        return save_audit_report(report, self._store)

    def layer(self, layer: str) -> "Layer":
        """Get a layer handle by name."""
        return Layer(layer, self._store)


class Layer:
    """SDK handle for one versioned layer."""

    def __init__(self, layer: str, store: SnapshotStore) -> None:
        """Create layer handle.

        Args:
            layer: Layer name.
            store: Snapshot store backend.
        """
        self._layer = layer
        self._store = store

    @property
    def name(self) -> str:
        """Return layer name."""
        return self._layer

    def list_versions(self) -> list[SnapshotManifest]:
        """List all layer versions ordered by creation time."""
        return self._store.list_versions(self._layer)

    def current_version(self) -> SnapshotManifest | None:
        """Return the current version manifest, if any."""
        return self._store.current_version(self._layer)

    def load_table(self, table_name: str, version_id: str | None = None) -> list[Any]:
        """Load one table of the current or a specific version.

        Silver tables load as curated records; bronze tables load as
        raw payload rows.
        """
        _, tables = self._store.load_tables(self._layer, version_id)
        rows = tables.get(table_name, [])
        if self._layer == SILVER_LAYER:
            return payload_to_records(table_name, rows)
        return rows

    def load_rejected(self, version_id: str | None = None) -> list[RejectedRow]:
        """Load dead-letter rows of the current or a specific version."""
        return self._store.load_rejected(self._layer, version_id)

    def export(self, version_id: str, output_uri: str) -> int:
        """Export a snapshot version to an S3 destination.

        Args:
            version_id: Snapshot version id.
            output_uri: Destination URI.

        Returns:
            Number of uploaded files.
        """
        request = VersionExportRequest(layer=self._layer, version_id=version_id, output_uri=output_uri)
        return self._store.export_version_to_s3(request)
