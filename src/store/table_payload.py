"""Table payload serialization and columnar persistence.

This module converts staged rows and curated records into JSON-safe
payload rows, writes and reads the JSONL table files of a snapshot, and
mirrors table payloads into Apache Lance datasets through pyarrow.
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from core.constants import SOURCE_ROW_COLUMN
from core.errors import SilverlineDependencyError, SilverlineError, SilverlineStoreError
from core.tables import TableSchema, curated_schema, staging_schema
from core.types import RejectedRow, StagedRow, TablePayload

PayloadRow = Mapping[str, object]


def staged_rows_to_payload(table_name: str, rows: Iterable[StagedRow]) -> TablePayload:
    """Serialize staged rows into a bronze table payload.

    Args:
        table_name: Bronze table identifier.
        rows: Staged rows in extract order.

    Returns:
        Payload with one flat row per staged row.
    """
    schema = staging_schema(table_name)
    payload_rows = []
    for row in rows:
        payload: dict[str, object] = {column: row.get(column) for column in schema.value_columns}
        payload[SOURCE_ROW_COLUMN] = row.row_number
        payload_rows.append(payload)
    return TablePayload(table_name=table_name, rows=tuple(payload_rows))


def payload_to_staged_rows(table_name: str, rows: Iterable[PayloadRow]) -> list[StagedRow]:
    """Deserialize bronze payload rows into staged rows.

    Raises:
        SilverlineStoreError: If a row lacks its source row number.
    """
    schema = staging_schema(table_name)
    staged: list[StagedRow] = []
    for payload in rows:
        row_number = payload.get(SOURCE_ROW_COLUMN)
        if not isinstance(row_number, int):
            raise SilverlineStoreError(
                f"Bronze row in '{table_name}' is missing integer '{SOURCE_ROW_COLUMN}'. "
                "Reload staging to rebuild the snapshot."
            )
        values = {column: _optional_text(payload.get(column)) for column in schema.value_columns}
        staged.append(StagedRow(table_name=table_name, row_number=row_number, values=values))
    return staged


def records_to_payload(table_name: str, records: Iterable[object]) -> TablePayload:
    """Serialize curated records into a silver table payload.

    Dates become ISO strings. ``loaded_at`` is left to the snapshot store.
    """
    rows = tuple(_jsonable(asdict(record)) for record in records)
    return TablePayload(table_name=table_name, rows=rows)


def payload_to_records(table_name: str, rows: Iterable[PayloadRow]) -> list[Any]:
    """Deserialize silver payload rows into curated records.

    Args:
        table_name: Silver table identifier.
        rows: Payload rows as read from a snapshot.

    Returns:
        Curated dataclass instances without their load timestamp.

    Raises:
        SilverlineStoreError: If a value does not match its column kind.
    """
    schema = curated_schema(table_name)
    record_type = schema.record_type
    if record_type is None:
        raise SilverlineStoreError(f"Table '{table_name}' has no curated record type.")
    kinds = {column.name: column.kind for column in schema.columns}
    records: list[Any] = []
    for payload in rows:
        values = {
            field.name: _decode_value(table_name, field.name, kinds[field.name], payload.get(field.name))
            for field in fields(record_type)
        }
        records.append(record_type(**values))
    return records


def rejected_to_payload(rejected: RejectedRow) -> dict[str, object]:
    """Serialize one dead-letter entry."""
    return {
        "table_name": rejected.table_name,
        "row_number": rejected.row_number,
        "reason": rejected.reason,
        "values": dict(rejected.values),
    }


def rejected_from_payload(payload: PayloadRow) -> RejectedRow:
    """Deserialize one dead-letter entry."""
    raw_values = payload.get("values")
    values = dict(raw_values) if isinstance(raw_values, Mapping) else {}
    row_number = payload.get("row_number")
    return RejectedRow(
        table_name=str(payload.get("table_name", "")),
        row_number=row_number if isinstance(row_number, int) else 0,
        reason=str(payload.get("reason", "")),
        values={str(key): _optional_text(value) for key, value in values.items()},
    )


def canonical_row_text(row: PayloadRow) -> str:
    """Serialize a payload row the way it is persisted."""
    return json.dumps(dict(row), sort_keys=True)


def write_jsonl(path: Path, rows: Iterable[PayloadRow]) -> None:
    """Write payload rows to a JSONL file.

    Raises:
        SilverlineStoreError: If the write fails.
    """
    lines = [canonical_row_text(row) for row in rows]
    body = "\n".join(lines) + "\n" if lines else ""
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as error:
        raise SilverlineStoreError(
            f"Failed to persist snapshot payload at {path}: {error}. "
            "Check write permissions and available disk space."
        ) from error


def read_jsonl(path: Path) -> list[dict[str, Any]]:
    """Read payload rows from a JSONL file.

    Raises:
        SilverlineStoreError: If the file is missing or a line is invalid.
    """
    if not path.exists():
        raise SilverlineStoreError(
            f"Failed to load snapshot payload: missing {path}. Recreate the snapshot."
        )
    rows: list[dict[str, Any]] = []
    for line_number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            continue
        rows.append(_parse_json_line(path, line, line_number))
    return rows


def write_lance_table(path: Path, schema: TableSchema, rows: list[PayloadRow]) -> None:
    """Mirror one table payload into a Lance dataset.

    Args:
        path: Target ``.lance`` directory.
        schema: Table schema providing Arrow column types.
        rows: Payload rows.

    Raises:
        SilverlineDependencyError: If lance or pyarrow is missing.
        SilverlineStoreError: If the dataset write fails.
    """
    try:
        import lance
    except ImportError as error:
        raise SilverlineDependencyError(
            "Columnar export requires pylance, but it is not installed. "
            "Install pylance or set SILVERLINE_COLUMNAR_EXPORT=0."
        ) from error
    try:
        table = build_arrow_table(schema, rows)
        lance.write_dataset(table, str(path), mode="overwrite")
    except SilverlineError:
        raise
    except Exception as error:
        raise SilverlineStoreError(
            f"Failed to write Lance dataset at {path}: {error}. "
            "Validate lance/pyarrow compatibility and retry the load."
        ) from error


def build_arrow_table(schema: TableSchema, rows: list[PayloadRow]) -> Any:
    """Build a typed pyarrow table from payload rows.

    Raises:
        SilverlineDependencyError: If pyarrow is missing.
    """
    try:
        import pyarrow as pa
    except ImportError as error:
        raise SilverlineDependencyError(
            "Columnar export requires pyarrow, but it is not installed. "
            "Install pyarrow or set SILVERLINE_COLUMNAR_EXPORT=0."
        ) from error
    arrow_types = {
        "string": pa.string(),
        "integer": pa.int64(),
        "date": pa.date32(),
        "timestamp": pa.timestamp("us", tz="UTC"),
    }
    arrow_schema = pa.schema(
        [pa.field(column.name, arrow_types[column.kind]) for column in schema.columns]
    )
    columns = {
        column.name: [
            _decode_value(schema.name, column.name, column.kind, row.get(column.name))
            for row in rows
        ]
        for column in schema.columns
    }
    return pa.table(columns, schema=arrow_schema)


def _jsonable(values: Mapping[str, object]) -> dict[str, object]:
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in values.items()
    }


def _decode_value(table_name: str, column: str, kind: str, value: object) -> object:
    if value is None:
        return None
    try:
        if kind == "date":
            return date.fromisoformat(str(value))
        if kind == "timestamp":
            return datetime.fromisoformat(str(value))
        if kind == "integer":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"expected integer, got {value!r}")
            return value
    except ValueError as error:
        raise SilverlineStoreError(
            f"Invalid value for {table_name}.{column} ({kind}): {error}. "
            "Recreate the snapshot from a fresh load."
        ) from error
    return str(value)


def _optional_text(value: object) -> str | None:
    return None if value is None else str(value)


def _parse_json_line(path: Path, line: str, line_number: int) -> dict[str, Any]:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise SilverlineStoreError(
            f"Failed to parse snapshot payload at {path}:{line_number}: "
            f"{error.msg}. Recreate the snapshot."
        ) from error
    if not isinstance(payload, dict):
        raise SilverlineStoreError(
            f"Failed to parse snapshot payload at {path}:{line_number}: "
            "expected a JSON object per line. Recreate the snapshot."
        )
    return payload

