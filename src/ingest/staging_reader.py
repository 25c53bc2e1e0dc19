"""CSV extract readers for staging loads.

This module reads one source extract per staging table into loosely
typed staged rows. Values are kept verbatim; empty fields become null.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Iterator

from core.errors import SilverlineStagingError
from core.tables import staging_schema
from core.types import StagedRow


def read_staging_table(table_name: str, csv_path: Path) -> list[StagedRow]:
    """Read one CSV extract into staged rows.

    Args:
        table_name: Bronze table identifier.
        csv_path: Path to the extract with a header row.

    Returns:
        Staged rows numbered from 1 in file order.

    Raises:
        SilverlineStagingError: If the file is missing, malformed, or its
            header does not match the table columns.
    """
    if not csv_path.is_file():
        raise SilverlineStagingError(
            f"Failed to read staging extract for '{table_name}' at {csv_path}: "
            "file does not exist. Check the source directory and layout file."
        )
    expected_columns = staging_schema(table_name).value_columns
    try:
        with csv_path.open(encoding="utf-8-sig", newline="") as handle:
            reader = csv.reader(handle)
            header = next(reader, None)
            _validate_header(table_name, csv_path, header, expected_columns)
            return [
                _build_row(table_name, csv_path, reader.line_num, row_number, fields, expected_columns)
                for row_number, fields in enumerate(_non_blank(reader), 1)
            ]
    except (OSError, UnicodeDecodeError, csv.Error) as error:
        raise SilverlineStagingError(
            f"Failed to read staging extract for '{table_name}' at {csv_path}: {error}. "
            "Export the extract as UTF-8 CSV and retry."
        ) from error


def _non_blank(reader: Iterable[list[str]]) -> Iterator[list[str]]:
    for fields in reader:
        if fields:
            yield fields


def _validate_header(
    table_name: str,
    csv_path: Path,
    header: list[str] | None,
    expected_columns: tuple[str, ...],
) -> None:
    """Require the header to list the table columns in order."""
    actual = tuple(column.strip() for column in header or [])
    if actual != expected_columns:
        raise SilverlineStagingError(
            f"Invalid header in staging extract for '{table_name}' at {csv_path}: "
            f"expected {', '.join(expected_columns)}; got {', '.join(actual) or '<empty>'}. "
            "Re-export the extract with the source system column layout."
        )


def _build_row(
    table_name: str,
    csv_path: Path,
    line_number: int,
    row_number: int,
    fields: list[str],
    expected_columns: tuple[str, ...],
) -> StagedRow:
    if len(fields) != len(expected_columns):
        raise SilverlineStagingError(
            f"Malformed row in staging extract for '{table_name}' at {csv_path}:{line_number}: "
            f"expected {len(expected_columns)} fields, got {len(fields)}. "
            "Fix the delimiter or quoting in the source extract."
        )
    values = {column: value if value != "" else None for column, value in zip(expected_columns, fields)}
    return StagedRow(table_name=table_name, row_number=row_number, values=values)
