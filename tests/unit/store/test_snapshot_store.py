"""Unit tests for the layer snapshot store."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from core.constants import CATALOG_FILE_NAME, SHADOW_DIR_PREFIX
from core.errors import SilverlineStoreError
from core.types import RejectedRow, SnapshotWriteRequest, TablePayload
from store import snapshot_store
from store.snapshot_store import SnapshotStore
from tests.config_factory import build_config


def _category_request(*category_ids: str) -> SnapshotWriteRequest:
    rows = tuple(
        {"category_id": category_id, "category": "Accessories", "subcategory": "Racks", "maintenance": "Yes"}
        for category_id in category_ids
    )
    return SnapshotWriteRequest(
        layer="silver",
        tables=(TablePayload(table_name="erp_px_cat_g1v2", rows=rows),),
        parent_version="bronze-1",
        rejected=(RejectedRow("crm_cust_info", 4, "null_business_key (cst_id)", {"cst_id": None}),),
    )


def test_create_snapshot_makes_version_current(tmp_path: Path) -> None:
    """A written snapshot should become the layer's current version."""
    store = SnapshotStore(build_config(tmp_path))

    manifest = store.create_snapshot(_category_request("AC_BR"))

    assert store.current_version("silver") == manifest and manifest.table_counts == {"erp_px_cat_g1v2": 1}


def test_create_snapshot_stamps_load_timestamp(tmp_path: Path) -> None:
    """Silver rows should carry the batch load timestamp."""
    store = SnapshotStore(build_config(tmp_path))
    manifest = store.create_snapshot(_category_request("AC_BR", "AC_HE"))

    _, tables = store.load_tables("silver")

    assert {row["loaded_at"] for row in tables["erp_px_cat_g1v2"]} == {manifest.created_at.isoformat()}


def test_content_digest_ignores_load_timestamp(tmp_path: Path) -> None:
    """Identical content should yield the same digest across loads."""
    store = SnapshotStore(build_config(tmp_path))

    first = store.create_snapshot(_category_request("AC_BR"))
    second = store.create_snapshot(_category_request("AC_BR"))

    assert first.content_digest == second.content_digest and first.version_id != second.version_id


def test_rejected_rows_are_persisted_with_version(tmp_path: Path) -> None:
    """Dead-letter rows should be readable from the version."""
    store = SnapshotStore(build_config(tmp_path))
    store.create_snapshot(_category_request("AC_BR"))

    rejected = store.load_rejected("silver")

    assert [(row.table_name, row.row_number) for row in rejected] == [("crm_cust_info", 4)]


def test_failed_catalog_swap_keeps_previous_version(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A failure before the pointer swap should leave the old version current."""
    store = SnapshotStore(build_config(tmp_path))
    previous = store.create_snapshot(_category_request("AC_BR"))

    def _fail(catalog_path: Path, catalog: dict) -> None:
        raise SilverlineStoreError("simulated catalog failure")

    monkeypatch.setattr(snapshot_store, "write_catalog_file", _fail)
    with pytest.raises(SilverlineStoreError):
        store.create_snapshot(_category_request("AC_HE"))

    versions_root = tmp_path / "layers" / "silver" / "versions"
    assert store.current_version("silver") == previous and sorted(p.name for p in versions_root.iterdir()) == [
        previous.version_id
    ]


def test_failed_table_write_removes_shadow_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A failed table write should leave no shadow directory behind."""
    store = SnapshotStore(build_config(tmp_path))

    def _fail(path: Path, rows: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(snapshot_store, "write_jsonl", _fail)
    with pytest.raises(SilverlineStoreError):
        store.create_snapshot(_category_request("AC_BR"))

    versions_root = tmp_path / "layers" / "silver" / "versions"
    assert not [p for p in versions_root.iterdir() if p.name.startswith(SHADOW_DIR_PREFIX)] and (
        store.current_version("silver") is None
    )


def test_catalog_records_current_version_pointer(tmp_path: Path) -> None:
    """The catalog file should point at the newest committed version."""
    store = SnapshotStore(build_config(tmp_path))
    store.create_snapshot(_category_request("AC_BR"))
    latest = store.create_snapshot(_category_request("AC_HE"))

    catalog = json.loads((tmp_path / "layers" / "silver" / CATALOG_FILE_NAME).read_text(encoding="utf-8"))

    assert catalog["current_version"] == latest.version_id and len(catalog["versions"]) == 2


def test_resolve_manifest_raises_for_unknown_version(tmp_path: Path) -> None:
    """Unknown version ids should raise a store error."""
    store = SnapshotStore(build_config(tmp_path))
    store.create_snapshot(_category_request("AC_BR"))

    with pytest.raises(SilverlineStoreError):
        store.resolve_manifest("silver", "silver-missing")

    assert len(store.list_versions("silver")) == 1


def test_unsupported_layer_is_rejected(tmp_path: Path) -> None:
    """Only bronze and silver layers should be accepted."""
    store = SnapshotStore(build_config(tmp_path))

    with pytest.raises(SilverlineStoreError):
        store.list_versions("gold")

    assert not (tmp_path / "layers" / "gold").exists()


def test_columnar_export_writes_lance_dataset(tmp_path: Path) -> None:
    """Enabled columnar export should mirror tables into Lance datasets."""
    lance = pytest.importorskip("lance")
    store = SnapshotStore(build_config(tmp_path, columnar_export=True))
    manifest = store.create_snapshot(_category_request("AC_BR", "AC_HE"))

    lance_path = store.version_dir("silver", manifest.version_id) / "tables" / "erp_px_cat_g1v2.lance"
    dataset = lance.dataset(str(lance_path))

    assert manifest.lance_tables == ("erp_px_cat_g1v2",) and dataset.count_rows() == 2


def test_unexpected_write_error_is_wrapped_and_cleaned_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Non-store errors during a write should surface as store errors with no shadow left."""
    store = SnapshotStore(build_config(tmp_path, columnar_export=True))

    def _fail(path: Path, schema: object, rows: object) -> None:
        raise OverflowError("Python int too large to convert to C long")

    monkeypatch.setattr(snapshot_store, "write_lance_table", _fail)
    with pytest.raises(SilverlineStoreError):
        store.create_snapshot(_category_request("AC_BR"))

    versions_root = tmp_path / "layers" / "silver" / "versions"
    assert list(versions_root.iterdir()) == [] and store.current_version("silver") is None


def test_retention_prunes_oldest_versions(tmp_path: Path) -> None:
    """Only the newest configured number of versions should be kept."""
    store = SnapshotStore(replace(build_config(tmp_path), retain_versions=2))
    store.create_snapshot(_category_request("AC_BR"))
    second = store.create_snapshot(_category_request("AC_HE"))
    third = store.create_snapshot(_category_request("CO_RF"))

    versions_root = tmp_path / "layers" / "silver" / "versions"
    assert [row.version_id for row in store.list_versions("silver")] == [
        second.version_id,
        third.version_id,
    ] and sorted(path.name for path in versions_root.iterdir()) == sorted([second.version_id, third.version_id])


def test_versions_are_kept_without_retention(tmp_path: Path) -> None:
    """Without a retention setting every version should stay listed."""
    store = SnapshotStore(build_config(tmp_path))
    for category_id in ("AC_BR", "AC_HE", "CO_RF"):
        store.create_snapshot(_category_request(category_id))

    assert len(store.list_versions("silver")) == 3
