"""Source extract layout loading.

This module resolves where each staging table's CSV extract lives
under a source directory. The default layout mirrors the CRM and ERP
export folders; a YAML file can override any table path.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import DEFAULT_SOURCE_LAYOUT
from core.errors import SilverlineConfigError
from core.tables import TABLE_NAMES


@dataclass(frozen=True)
class SourceLayout:
    """Relative extract path per staging table.

    Attributes:
        table_paths: Mapping of table name to path relative to the source root.
    """

    table_paths: Mapping[str, str]

    def resolve(self, source_root: Path) -> dict[str, Path]:
        """Resolve extract paths against a source directory."""
        return {
            table_name: source_root / relative_path
            for table_name, relative_path in self.table_paths.items()
        }


def default_source_layout() -> SourceLayout:
    """Return the built-in CRM/ERP extract layout."""
    return SourceLayout(table_paths=dict(DEFAULT_SOURCE_LAYOUT))


def load_source_layout(layout_path: str | None) -> SourceLayout:
    """Load a layout file, falling back to the default layout.

    The YAML file holds a ``tables`` mapping of table name to relative
    path. Tables it does not mention keep their default paths.

    Args:
        layout_path: Optional YAML file path.

    Returns:
        Merged source layout.

    Raises:
        SilverlineConfigError: If the file is missing or malformed.
    """
    if layout_path is None:
        return default_source_layout()
    layout_file = Path(layout_path).expanduser().resolve()
    if not layout_file.exists():
        raise SilverlineConfigError(
            f"Source layout file does not exist at {layout_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(layout_file.read_text(encoding="utf-8")))
    except yaml.YAMLError as error:
        raise SilverlineConfigError(
            f"Failed to parse source layout at {layout_file}: {error}. Fix YAML syntax and retry."
        ) from error
    overrides = _parse_table_overrides(layout_file, payload)
    merged = dict(DEFAULT_SOURCE_LAYOUT)
    merged.update(overrides)
    return SourceLayout(table_paths=merged)


def _parse_table_overrides(layout_file: Path, payload: object) -> dict[str, str]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping) or not isinstance(payload.get("tables", {}), Mapping):
        raise SilverlineConfigError(
            f"Invalid source layout at {layout_file}: expected a 'tables' mapping "
            "of table name to relative CSV path."
        )
    overrides: dict[str, str] = {}
    for table_name, relative_path in dict(payload.get("tables", {})).items():
        if table_name not in TABLE_NAMES:
            raise SilverlineConfigError(
                f"Invalid source layout at {layout_file}: unknown table '{table_name}'. "
                f"Known tables: {', '.join(TABLE_NAMES)}."
            )
        if not isinstance(relative_path, str) or not relative_path.strip():
            raise SilverlineConfigError(
                f"Invalid source layout at {layout_file}: path for '{table_name}' "
                "must be a non-empty string."
            )
        overrides[str(table_name)] = relative_path.strip()
    return overrides
