"""Unit tests for table payload serialization."""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from core.errors import SilverlineStoreError
from core.tables import curated_schema
from core.types import ProductRecord
from store.table_payload import (
    build_arrow_table,
    payload_to_records,
    payload_to_staged_rows,
    read_jsonl,
    records_to_payload,
    staged_rows_to_payload,
    write_jsonl,
    write_lance_table,
)
from tests.staged_rows import staged_row


def _product() -> ProductRecord:
    return ProductRecord(
        product_id=212,
        category_id="AC_HE",
        product_key="HL-U509-R",
        product_name="Sport-100 Helmet- Red",
        product_cost=12,
        product_line="Other Sales",
        start_date=date(2011, 7, 1),
        end_date=date(2012, 6, 30),
    )


def test_records_to_payload_serializes_dates_as_iso_text() -> None:
    """Curated dates should serialize as ISO strings."""
    payload = records_to_payload("crm_prd_info", [_product()])

    assert payload.rows[0]["start_date"] == "2011-07-01" and payload.rows[0]["end_date"] == "2012-06-30"


def test_payload_to_records_restores_curated_records() -> None:
    """Silver payload rows should deserialize into typed records."""
    row = {**records_to_payload("crm_prd_info", [_product()]).rows[0], "loaded_at": "2025-01-01T00:00:00+00:00"}

    assert payload_to_records("crm_prd_info", [row]) == [_product()]


def test_payload_to_records_rejects_wrong_kind() -> None:
    """Integer columns holding text should fail with a store error."""
    row = {**records_to_payload("crm_prd_info", [_product()]).rows[0], "product_cost": "twelve"}

    with pytest.raises(SilverlineStoreError):
        payload_to_records("crm_prd_info", [row])

    assert row["product_cost"] == "twelve"


def test_staged_rows_keep_source_row_numbers() -> None:
    """Bronze payload rows should carry their source row number."""
    rows = [staged_row("erp_loc_a101", 7, cid="AW-1", cntry=None)]

    restored = payload_to_staged_rows("erp_loc_a101", staged_rows_to_payload("erp_loc_a101", rows).rows)

    assert restored == rows


def test_jsonl_files_round_trip_payload_rows(tmp_path: Path) -> None:
    """JSONL writes should be readable with sorted keys."""
    path = tmp_path / "table.jsonl"
    write_jsonl(path, [{"b": 1, "a": None}])

    assert read_jsonl(path) == [{"a": None, "b": 1}] and path.read_text(encoding="utf-8").startswith('{"a"')


def test_read_jsonl_raises_for_invalid_line(tmp_path: Path) -> None:
    """Malformed JSONL should raise a store error."""
    path = tmp_path / "table.jsonl"
    path.write_text("{not json}\n", encoding="utf-8")

    with pytest.raises(SilverlineStoreError):
        read_jsonl(path)

    assert path.exists()


def test_build_arrow_table_uses_typed_columns() -> None:
    """Arrow tables should use date and integer column types."""
    pa = pytest.importorskip("pyarrow")
    loaded_at = datetime(2025, 1, 1, tzinfo=timezone.utc).isoformat()
    row = {**records_to_payload("crm_prd_info", [_product()]).rows[0], "loaded_at": loaded_at}

    table = build_arrow_table(curated_schema("crm_prd_info"), [row])

    assert table.schema.field("start_date").type == pa.date32() and table.schema.field(
        "product_cost"
    ).type == pa.int64()


def test_write_lance_table_wraps_integer_overflow(tmp_path: Path) -> None:
    """Integers beyond 64 bits should fail the Lance write with a store error."""
    pytest.importorskip("lance")
    row = {"order_number": "SO1", "quantity": 2**70}

    with pytest.raises(SilverlineStoreError):
        write_lance_table(tmp_path / "sales.lance", curated_schema("crm_sales_details"), [row])

    assert not (tmp_path / "sales.lance").exists()
