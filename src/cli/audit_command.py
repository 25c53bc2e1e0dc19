"""Audit command wiring for Silverline CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.audit import render_audit_report
from core.audit_types import AuditReport
from core.errors import SilverlineError
from store.warehouse_sdk import SilverlineClient


def add_audit_command(subparsers: Any) -> None:
    """Register audit subcommand."""
    parser = subparsers.add_parser(
        "audit",
        help="Run data-quality checks against a silver version",
    )
    parser.add_argument("--version-id", help="Optional silver version id, current when omitted")
    parser.add_argument(
        "--fail-on-findings",
        action="store_true",
        help="Exit with status 1 when any check reports findings",
    )


def run_audit_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Execute the audit and print the rendered report."""
    report = audit_and_print(client, args.version_id)
    if report is None:
        return 1
    if args.fail_on_findings and not report.passed:
        return 1
    return 0


def audit_and_print(client: SilverlineClient, version_id: str | None) -> AuditReport | None:
    """Audit a silver version, persist the report, and print it.

    Args:
        client: SDK client.
        version_id: Silver version id, current when ``None``.

    Returns:
        The report, or ``None`` after printing an ``audit_error`` line.
    """
    try:
        report = client.audit(version_id)
        report_path = client.save_audit_report(report)
    except SilverlineError as error:
        print(f"audit_error={error}")
        return None
    print(render_audit_report(report))
    print(f"report_path={report_path}")
    return report
