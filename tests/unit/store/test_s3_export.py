"""Unit tests for S3 snapshot export."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import SilverlineStoreError
from core.types import SnapshotWriteRequest, TablePayload, VersionExportRequest
from store import snapshot_store
from store.s3_export import upload_directory
from store.snapshot_store import SnapshotStore
from tests.config_factory import build_config


class _RecordingClient:
    def __init__(self, fail: bool = False) -> None:
        self.uploads: list[tuple[str, str]] = []
        self.content_types: dict[str, str] = {}
        self._fail = fail

    def upload_file(self, local_path: str, bucket: str, key: str, ExtraArgs: dict[str, str]) -> None:
        if self._fail:
            raise RuntimeError("access denied")
        self.uploads.append((bucket, key))
        self.content_types[key] = ExtraArgs["ContentType"]


def test_upload_directory_uploads_every_file(tmp_path: Path) -> None:
    """Every file under the version should be uploaded under the prefix."""
    (tmp_path / "tables").mkdir()
    (tmp_path / "tables" / "a.jsonl").write_text("{}\n", encoding="utf-8")
    (tmp_path / "manifest.json").write_text("{}\n", encoding="utf-8")
    client = _RecordingClient()

    uploaded = upload_directory(client, tmp_path, "bucket", "exports/")

    assert uploaded == 2 and sorted(client.uploads) == [
        ("bucket", "exports/manifest.json"),
        ("bucket", "exports/tables/a.jsonl"),
    ]


def test_upload_directory_sends_manifest_last(tmp_path: Path) -> None:
    """The manifest should be the final object uploaded."""
    (tmp_path / "tables").mkdir()
    (tmp_path / "tables" / "z.jsonl").write_text("{}\n", encoding="utf-8")
    (tmp_path / "manifest.json").write_text("{}\n", encoding="utf-8")
    client = _RecordingClient()

    upload_directory(client, tmp_path, "bucket", "exports")

    assert client.uploads[-1] == ("bucket", "exports/manifest.json")


def test_upload_directory_sets_content_types(tmp_path: Path) -> None:
    """JSON lines tables should be uploaded as newline-delimited JSON."""
    (tmp_path / "rejected.jsonl").write_text("", encoding="utf-8")
    client = _RecordingClient()

    upload_directory(client, tmp_path, "bucket", "exports")

    assert client.content_types == {"exports/rejected.jsonl": "application/x-ndjson"}


def test_upload_directory_wraps_client_errors(tmp_path: Path) -> None:
    """Upload failures should surface as store errors."""
    (tmp_path / "manifest.json").write_text("{}\n", encoding="utf-8")

    with pytest.raises(SilverlineStoreError):
        upload_directory(_RecordingClient(fail=True), tmp_path, "bucket", "exports")

    assert (tmp_path / "manifest.json").exists()


def test_export_version_to_s3_uses_parsed_location(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Store exports should upload the version under the URI prefix."""
    store = SnapshotStore(build_config(tmp_path))
    manifest = store.create_snapshot(
        SnapshotWriteRequest(layer="bronze", tables=(TablePayload(table_name="erp_loc_a101", rows=()),))
    )
    client = _RecordingClient()
    monkeypatch.setattr(snapshot_store, "create_s3_client", lambda config: client)

    store.export_version_to_s3(VersionExportRequest("bronze", manifest.version_id, "s3://lake/bronze/v1"))

    assert {key for _, key in client.uploads} == {
        "bronze/v1/manifest.json",
        "bronze/v1/rejected.jsonl",
        "bronze/v1/tables/erp_loc_a101.jsonl",
    }


def test_export_rejects_invalid_uri(tmp_path: Path) -> None:
    """Non-S3 destinations should be rejected before any upload."""
    store = SnapshotStore(build_config(tmp_path))

    with pytest.raises(SilverlineStoreError):
        store.export_version_to_s3(VersionExportRequest("bronze", "bronze-x", "file:///tmp/out"))

    assert store.list_versions("bronze") == []
