"""Catalog and manifest persistence helpers.

This module isolates JSON catalog IO, manifest serialization, and
version id generation. Catalog replacement goes through a temporary
file and ``os.replace`` so readers see either the old or the new
current version, never a partial file.
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, cast

from core.constants import HASH_ALGORITHM, MANIFEST_FILE_NAME
from core.errors import SilverlineStoreError
from core.types import SnapshotManifest


def build_version_id(layer: str, created_at: datetime, content_digest: str) -> str:
    """Build a version id from layer, timestamp, and content digest.

    Args:
        layer: Layer name.
        created_at: Snapshot creation timestamp.
        content_digest: Snapshot content digest.

    Returns:
        Version id string.
    """
    timestamp = created_at.strftime("%Y%m%dT%H%M%S%fZ")
    return f"{layer}-{timestamp}-{content_digest[:10]}"


def compute_content_digest(table_lines: Iterable[tuple[str, Iterable[str]]]) -> str:
    """Hash canonical table rows into one content digest.

    Args:
        table_lines: Pairs of table name and canonical row texts.

    Returns:
        Hex digest stable for identical table content.
    """
    digest = hashlib.new(HASH_ALGORITHM)
    for table_name, lines in table_lines:
        digest.update(f"table:{table_name}\n".encode("utf-8"))
        for line in lines:
            digest.update(line.encode("utf-8"))
            digest.update(b"\n")
    return digest.hexdigest()


def manifest_to_dict(manifest: SnapshotManifest) -> dict[str, Any]:
    """Serialize a manifest into a JSON-safe dictionary."""
    manifest_dict = asdict(manifest)
    manifest_dict["created_at"] = manifest.created_at.isoformat()
    manifest_dict["table_counts"] = dict(manifest.table_counts)
    manifest_dict["lance_tables"] = list(manifest.lance_tables)
    return manifest_dict


def manifest_from_dict(payload: dict[str, Any]) -> SnapshotManifest:
    """Deserialize manifest payload from dictionary.

    Args:
        payload: Manifest dictionary.

    Returns:
        Typed snapshot manifest.
    """
    table_counts = cast(dict[str, Any], payload.get("table_counts", {}))
    return SnapshotManifest(
        layer=str(payload["layer"]),
        version_id=str(payload["version_id"]),
        created_at=datetime.fromisoformat(str(payload["created_at"])),
        parent_version=str(payload["parent_version"]) if payload.get("parent_version") else None,
        table_counts={str(name): int(count) for name, count in table_counts.items()},
        rejected_count=int(payload.get("rejected_count", 0)),
        content_digest=str(payload["content_digest"]),
        lance_tables=tuple(str(name) for name in payload.get("lance_tables", [])),
    )


def write_manifest_file(version_dir: Path, manifest: SnapshotManifest) -> None:
    """Write per-version manifest file.

    Args:
        version_dir: Snapshot version directory.
        manifest: Manifest payload.
    """
    manifest_path = version_dir / MANIFEST_FILE_NAME
    manifest_path.write_text(
        json.dumps(manifest_to_dict(manifest), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def empty_catalog() -> dict[str, Any]:
    """Return the catalog payload of a layer with no versions."""
    return {"current_version": None, "versions": []}


def with_manifest(catalog: dict[str, Any], manifest: SnapshotManifest) -> dict[str, Any]:
    """Return a new catalog payload with a manifest appended and made current."""
    versions = cast(list[dict[str, Any]], catalog.get("versions", []))
    return {
        "current_version": manifest.version_id,
        "versions": [*versions, manifest_to_dict(manifest)],
    }


def prune_catalog(catalog: dict[str, Any], retain_versions: int | None) -> tuple[dict[str, Any], list[str]]:
    """Keep only the newest versions of a catalog.

    Args:
        catalog: Catalog payload with versions in creation order.
        retain_versions: Number of newest versions to keep; ``None`` keeps all.

    Returns:
        Pruned catalog and the ids of the versions it no longer lists.
    """
    versions = cast(list[dict[str, Any]], catalog.get("versions", []))
    if retain_versions is None or len(versions) <= retain_versions:
        return catalog, []
    expired = versions[: len(versions) - retain_versions]
    pruned = {**catalog, "versions": versions[len(versions) - retain_versions :]}
    return pruned, [str(item["version_id"]) for item in expired]


def write_catalog_file(catalog_path: Path, catalog: dict[str, Any]) -> None:
    """Atomically replace the layer catalog.

    Args:
        catalog_path: Catalog JSON path.
        catalog: Catalog payload.

    Raises:
        SilverlineStoreError: If the catalog cannot be replaced.
    """
    temp_path = catalog_path.with_name(f".{catalog_path.name}.tmp")
    try:
        temp_path.write_text(json.dumps(catalog, indent=2) + "\n", encoding="utf-8")
        os.replace(temp_path, catalog_path)
    except OSError as error:
        temp_path.unlink(missing_ok=True)
        raise SilverlineStoreError(
            f"Failed to replace layer catalog at {catalog_path}: {error}. "
            "Check write permissions and retry the load."
        ) from error


def read_catalog_file(catalog_path: Path) -> dict[str, Any]:
    """Read and validate a layer catalog payload.

    Args:
        catalog_path: Catalog JSON path.

    Returns:
        Parsed catalog object; an empty catalog when the file is absent.

    Raises:
        SilverlineStoreError: If the catalog is invalid.
    """
    if not catalog_path.exists():
        return empty_catalog()
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise SilverlineStoreError(
            f"Failed to parse layer catalog at {catalog_path}: {error.msg}. "
            "Restore the catalog from version manifests."
        ) from error
    if not isinstance(payload, dict) or not isinstance(payload.get("versions"), list):
        raise SilverlineStoreError(
            f"Failed to parse layer catalog at {catalog_path}: "
            "expected an object with a 'versions' list. Restore the catalog."
        )
    return payload
