"""S3 export helpers for layer snapshots.

This module encapsulates boto3 client creation and version directory
upload for snapshot exports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.config import SilverlineConfig
from core.constants import MANIFEST_FILE_NAME
from core.errors import SilverlineDependencyError, SilverlineStoreError

_CONTENT_TYPES = {".json": "application/json", ".jsonl": "application/x-ndjson"}
_DEFAULT_CONTENT_TYPE = "application/octet-stream"


def create_s3_client(config: SilverlineConfig) -> Any:
    """Create boto3 S3 client for exports.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 S3 client.

    Raises:
        SilverlineDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise SilverlineDependencyError(
            "S3 export requires boto3, but it is not installed. "
            "Install boto3 to export versions to s3:// destinations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def upload_directory(s3_client: Any, version_dir: Path, bucket: str, prefix: str) -> int:
    """Upload every file of a version directory to S3.

    Table and dead-letter files go first; the manifest is uploaded last
    so a destination holding ``manifest.json`` always holds the full
    version.

    Args:
        s3_client: Boto3 S3 client.
        version_dir: Local version directory.
        bucket: Destination bucket.
        prefix: Destination key prefix.

    Returns:
        Number of uploaded files.

    Raises:
        SilverlineStoreError: If an upload fails.
    """
    local_files = sorted(
        (path for path in version_dir.rglob("*") if path.is_file()),
        key=lambda path: (path.name == MANIFEST_FILE_NAME, path.as_posix()),
    )
    for local_file in local_files:
        relative_path = local_file.relative_to(version_dir)
        object_key = f"{prefix.rstrip('/')}/{relative_path.as_posix()}"
        extra_args = {"ContentType": _CONTENT_TYPES.get(local_file.suffix, _DEFAULT_CONTENT_TYPE)}
        try:
            s3_client.upload_file(str(local_file), bucket, object_key, ExtraArgs=extra_args)
        except Exception as error:
            raise SilverlineStoreError(
                f"Failed to export snapshot file {local_file} to s3://{bucket}/{object_key}: {error}. "
                "Check AWS credentials and retry export."
            ) from error
    return len(local_files)
