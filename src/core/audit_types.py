"""Typed models for curated snapshot audits."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from core.types import (
    CategoryRecord,
    CustomerRecord,
    DemographicRecord,
    LocationRecord,
    ProductRecord,
    SalesRecord,
    StagedRow,
)


@dataclass(frozen=True)
class AuditFinding:
    """One rule violation found in a curated snapshot.

    Attributes:
        entity: Table the offending row belongs to.
        rule: Audit rule identifier.
        row_identifier: Business key or row number of the offending row.
        detail: Human-readable description of the violation.
    """

    entity: str
    rule: str
    row_identifier: str
    detail: str


@dataclass(frozen=True)
class AuditCheckResult:
    """Outcome summary of one audit check."""

    check_id: str
    title: str
    rule: str
    finding_count: int
    duration_seconds: float


@dataclass(frozen=True)
class AuditReport:
    """Final audit report for one silver version."""

    version_id: str
    staging_version_id: str | None
    reference_date: date
    checks: tuple[AuditCheckResult, ...]
    findings: tuple[AuditFinding, ...]

    @property
    def finding_count(self) -> int:
        """Count findings across all checks."""
        return len(self.findings)

    @property
    def passed(self) -> bool:
        """Whether no check produced a finding."""
        return not self.findings

    def findings_for(self, rule: str) -> tuple[AuditFinding, ...]:
        """Return findings produced by one rule."""
        return tuple(finding for finding in self.findings if finding.rule == rule)


@dataclass(frozen=True)
class AuditContext:
    """Curated records and staged sales rows inspected by audit checks."""

    reference_date: date
    customers: tuple[CustomerRecord, ...] = ()
    products: tuple[ProductRecord, ...] = ()
    sales: tuple[SalesRecord, ...] = ()
    demographics: tuple[DemographicRecord, ...] = ()
    locations: tuple[LocationRecord, ...] = ()
    categories: tuple[CategoryRecord, ...] = ()
    staged_sales: tuple[StagedRow, ...] = ()
