"""Curated snapshot audit orchestration and report formatting."""

from __future__ import annotations

import json
import time
from datetime import date
from pathlib import Path

from core.audit_checks import build_checks
from core.audit_types import AuditCheckResult, AuditContext, AuditFinding, AuditReport
from core.constants import AUDIT_REPORT_SUFFIX, AUDITS_DIR_NAME, BRONZE_LAYER, SILVER_LAYER
from core.errors import SilverlineAuditError, SilverlineStoreError
from core.logging_config import get_logger
from core.tables import (
    CRM_CUSTOMERS,
    CRM_PRODUCTS,
    CRM_SALES,
    ERP_CATEGORIES,
    ERP_DEMOGRAPHICS,
    ERP_LOCATIONS,
)
from core.types import SnapshotManifest, StagedRow
from store.snapshot_store import SnapshotStore
from store.table_payload import payload_to_records, payload_to_staged_rows

_LOGGER = get_logger(__name__)


def run_audit(
    store: SnapshotStore,
    reference_date: date,
    version_id: str | None = None,
) -> AuditReport:
    """Audit one silver version and return a structured report.

    Args:
        store: Snapshot store holding the layers.
        reference_date: Date treated as today by range checks.
        version_id: Silver version to audit; current version when omitted.

    Returns:
        Audit report with per-check summaries and all findings.

    Raises:
        SilverlineAuditError: If the version cannot be loaded.
    """
    manifest, context = _build_context(store, reference_date, version_id)
    results: list[AuditCheckResult] = []
    findings: list[AuditFinding] = []
    for check_id, title, rule, check_fn in build_checks():
        started_at = time.monotonic()
        check_findings = check_fn(context)
        results.append(
            AuditCheckResult(
                check_id=check_id,
                title=title,
                rule=rule,
                finding_count=len(check_findings),
                duration_seconds=round(time.monotonic() - started_at, 3),
            )
        )
        findings.extend(check_findings)
    report = AuditReport(
        version_id=manifest.version_id,
        staging_version_id=manifest.parent_version,
        reference_date=reference_date,
        checks=tuple(results),
        findings=tuple(findings),
    )
    _LOGGER.info(
        "audit_completed",
        version_id=report.version_id,
        finding_count=report.finding_count,
        failed_checks=[row.rule for row in results if row.finding_count],
    )
    return report


def _build_context(
    store: SnapshotStore,
    reference_date: date,
    version_id: str | None,
) -> tuple[SnapshotManifest, AuditContext]:
    try:
        manifest, tables = store.load_tables(SILVER_LAYER, version_id)
        staged_sales = _load_staged_sales(store, manifest.parent_version)
        context = AuditContext(
            reference_date=reference_date,
            customers=tuple(payload_to_records(CRM_CUSTOMERS, tables.get(CRM_CUSTOMERS, []))),
            products=tuple(payload_to_records(CRM_PRODUCTS, tables.get(CRM_PRODUCTS, []))),
            sales=tuple(payload_to_records(CRM_SALES, tables.get(CRM_SALES, []))),
            demographics=tuple(payload_to_records(ERP_DEMOGRAPHICS, tables.get(ERP_DEMOGRAPHICS, []))),
            locations=tuple(payload_to_records(ERP_LOCATIONS, tables.get(ERP_LOCATIONS, []))),
            categories=tuple(payload_to_records(ERP_CATEGORIES, tables.get(ERP_CATEGORIES, []))),
            staged_sales=staged_sales,
        )
    except SilverlineStoreError as error:
        raise SilverlineAuditError(
            f"Failed to load silver snapshot for audit: {error}"
        ) from error
    return manifest, context


def _load_staged_sales(store: SnapshotStore, parent_version: str | None) -> tuple[StagedRow, ...]:
    """Load bronze sales rows of the parent version when it still exists."""
    if parent_version is None:
        return ()
    known_versions = {manifest.version_id for manifest in store.list_versions(BRONZE_LAYER)}
    if parent_version not in known_versions:
        return ()
    _, tables = store.load_tables(BRONZE_LAYER, parent_version)
    return tuple(payload_to_staged_rows(CRM_SALES, tables.get(CRM_SALES, [])))


def render_audit_report(report: AuditReport) -> str:
    """Render report into stable multi-line text for CLI output."""
    lines = [
        f"version_id={report.version_id}",
        f"staging_version_id={report.staging_version_id or '-'}",
        f"reference_date={report.reference_date.isoformat()}",
    ]
    for row in report.checks:
        status = "PASSED" if row.finding_count == 0 else "FINDINGS"
        lines.append(
            f"[{status}] {row.check_id} {row.title} "
            f"({row.duration_seconds:.3f}s) :: findings={row.finding_count}"
        )
    for finding in report.findings:
        lines.append(f"  {finding.rule} {finding.entity} {finding.row_identifier}: {finding.detail}")
    lines.append(f"findings={report.finding_count}")
    return "\n".join(lines)


def save_audit_report(report: AuditReport, store: SnapshotStore) -> Path:
    """Persist report JSON to ``<data_root>/audits/<version_id>.json``.

    The audited version directory is never touched. A rerun overwrites
    the previous report of the same version.

    Raises:
        SilverlineAuditError: If the report file cannot be written.
    """
    report_path = store.data_root / AUDITS_DIR_NAME / f"{report.version_id}{AUDIT_REPORT_SUFFIX}"
    payload = {
        "version_id": report.version_id,
        "staging_version_id": report.staging_version_id,
        "reference_date": report.reference_date.isoformat(),
        "checks": [
            {
                "check_id": row.check_id,
                "title": row.title,
                "rule": row.rule,
                "finding_count": row.finding_count,
                "duration_seconds": row.duration_seconds,
            }
            for row in report.checks
        ],
        "findings": [
            {
                "entity": finding.entity,
                "rule": finding.rule,
                "row_identifier": finding.row_identifier,
                "detail": finding.detail,
            }
            for finding in report.findings
        ],
    }
    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as error:
        raise SilverlineAuditError(
            f"Failed to write audit report at {report_path}: {error}. "
            "Check data root permissions and rerun the audit."
        ) from error
    return report_path

