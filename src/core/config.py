"""Runtime configuration model for Silverline.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT
from core.errors import SilverlineConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class SilverlineConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for layer snapshots and catalogs.
        s3_region: Optional default AWS region for S3 exports.
        s3_profile: Optional AWS profile for boto3 session initialization.
        reference_date: Date treated as "today" by birthdate rules and audits.
        columnar_export: Whether snapshots also write Lance datasets.
        retain_versions: Versions kept per layer, or ``None`` to keep all.
    """

    data_root: Path
    s3_region: str | None
    s3_profile: str | None
    reference_date: date
    columnar_export: bool = True
    retain_versions: int | None = None

    @classmethod
    def from_env(cls) -> "SilverlineConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SilverlineConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("SILVERLINE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        reference_date = _parse_reference_date(os.getenv("SILVERLINE_REFERENCE_DATE"))
        columnar_export = _parse_flag(
            "SILVERLINE_COLUMNAR_EXPORT", os.getenv("SILVERLINE_COLUMNAR_EXPORT", "1")
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            s3_region=os.getenv("SILVERLINE_S3_REGION"),
            s3_profile=os.getenv("SILVERLINE_S3_PROFILE"),
            reference_date=reference_date,
            columnar_export=columnar_export,
            retain_versions=_parse_retention(os.getenv("SILVERLINE_RETAIN_VERSIONS")),
        )


def _parse_reference_date(raw_value: str | None) -> date:
    """Parse the reference date environment value.

    Args:
        raw_value: Raw ISO date string, or ``None`` for today.

    Returns:
        Parsed date.

    Raises:
        SilverlineConfigError: If value is not an ISO date.
    """
    if raw_value is None or not raw_value.strip():
        return date.today()
    try:
        return date.fromisoformat(raw_value.strip())
    except ValueError as error:
        raise SilverlineConfigError(
            "Invalid SILVERLINE_REFERENCE_DATE value: "
            f"expected YYYY-MM-DD, got '{raw_value}'. "
            "Unset it to use the current date."
        ) from error


def _parse_retention(raw_value: str | None) -> int | None:
    """Parse the per-layer version retention count.

    Raises:
        SilverlineConfigError: If value is not a positive integer.
    """
    if raw_value is None or not raw_value.strip():
        return None
    text = raw_value.strip()
    if not (text.isascii() and text.isdigit()) or int(text) < 1:
        raise SilverlineConfigError(
            "Invalid SILVERLINE_RETAIN_VERSIONS value: "
            f"expected a positive integer, got '{raw_value}'. "
            "Unset it to keep every version."
        )
    return int(text)


def _parse_flag(name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Raises:
        SilverlineConfigError: If value is not a recognised flag.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SilverlineConfigError(
        f"Invalid {name} value: expected one of {_TRUE_VALUES + _FALSE_VALUES}, "
        f"got '{raw_value}'."
    )
