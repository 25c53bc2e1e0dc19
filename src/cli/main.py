"""Silverline CLI entry points.

This module exposes commands for staging and curated loads, audits,
version listing, and exports. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.audit_command import add_audit_command, audit_and_print, run_audit_command
from core.config import SilverlineConfig
from core.constants import SUPPORTED_LAYERS
from core.errors import SilverlineError
from store.warehouse_sdk import SilverlineClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="silverline", description="Silverline warehouse CLI")
    parser.add_argument("--data-root", help="Override SILVERLINE_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_load_staging_command(subparsers)
    _add_load_curated_command(subparsers)
    _add_run_command(subparsers)
    _add_versions_command(subparsers)
    add_audit_command(subparsers)
    _add_export_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Silverline CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.data_root)
    if args.command == "load-staging":
        return _run_load_staging_command(client, args)
    if args.command == "load-curated":
        return _run_load_curated_command(client, args)
    if args.command == "run":
        return _run_run_command(client, args)
    if args.command == "versions":
        return _run_versions_command(client, args)
    if args.command == "audit":
        return run_audit_command(client, args)
    if args.command == "export":
        return _run_export_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> SilverlineClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = SilverlineConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return SilverlineClient(config)


def _run_load_staging_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Handle load-staging command."""
    try:
        result = client.load_staging(args.source_dir, args.layout)
    except SilverlineError as error:
        print(f"load_error={error}")
        return 1
    print(result.version_id)
    return 0


def _run_load_curated_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Handle load-curated command."""
    try:
        result = client.load_curated()
    except SilverlineError as error:
        print(f"load_error={error}")
        return 1
    print(result.version_id)
    return 0


def _run_run_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Handle run command: staging load, curated load, then optional audit.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    try:
        staging = client.load_staging(args.source_dir, args.layout)
        curated = client.load_curated()
    except SilverlineError as error:
        print(f"load_error={error}")
        return 1
    print(f"staging_version_id={staging.version_id}")
    print(f"curated_version_id={curated.version_id}")
    print(f"rejected_rows={curated.rejected_total}")
    if args.audit and audit_and_print(client, curated.version_id) is None:
        return 1
    return 0


def _run_versions_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Handle versions command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    layer = client.layer(args.layer)
    current = layer.current_version()
    current_id = current.version_id if current else None
    for manifest in layer.list_versions():
        marker = "*" if manifest.version_id == current_id else "-"
        print(
            f"{manifest.version_id}\t"
            f"{sum(manifest.table_counts.values())}\t"
            f"{manifest.rejected_count}\t"
            f"{manifest.created_at.isoformat()}\t"
            f"{manifest.parent_version or '-'}\t"
            f"{marker}"
        )
    return 0


def _run_export_command(client: SilverlineClient, args: argparse.Namespace) -> int:
    """Handle export command."""
    try:
        uploaded = client.layer(args.layer).export(args.version_id, args.output_uri)
    except SilverlineError as error:
        print(f"export_error={error}")
        return 1
    print(f"uploaded_files={uploaded}")
    return 0


def _add_load_staging_command(subparsers: Any) -> None:
    """Register load-staging subcommand."""
    parser = subparsers.add_parser("load-staging", help="Reload bronze tables from CSV extracts")
    parser.add_argument("source_dir", help="Directory holding source_crm/ and source_erp/ extracts")
    parser.add_argument("--layout", help="Optional YAML file overriding extract paths")


def _add_load_curated_command(subparsers: Any) -> None:
    """Register load-curated subcommand."""
    subparsers.add_parser("load-curated", help="Reload silver tables from the current bronze version")


def _add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    parser = subparsers.add_parser("run", help="Run staging and curated loads back to back")
    parser.add_argument("source_dir", help="Directory holding source_crm/ and source_erp/ extracts")
    parser.add_argument("--layout", help="Optional YAML file overriding extract paths")
    parser.add_argument("--audit", action="store_true", help="Audit the new silver version")


def _add_versions_command(subparsers: Any) -> None:
    """Register versions subcommand."""
    parser = subparsers.add_parser("versions", help="List layer versions")
    parser.add_argument("--layer", choices=SUPPORTED_LAYERS, default="silver", help="Layer name")


def _add_export_command(subparsers: Any) -> None:
    """Register export subcommand."""
    parser = subparsers.add_parser("export", help="Upload a layer version to S3")
    parser.add_argument("--layer", choices=SUPPORTED_LAYERS, default="silver", help="Layer name")
    parser.add_argument("--version-id", required=True, help="Version id to export")
    parser.add_argument("--output-uri", required=True, help="Destination s3://bucket/prefix")
