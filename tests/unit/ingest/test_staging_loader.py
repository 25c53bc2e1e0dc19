"""Unit tests for staging load orchestration."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from core.errors import SilverlineStagingError
from core.source_layout import load_source_layout
from ingest.staging_loader import load_staging
from store.snapshot_store import SnapshotStore
from tests.config_factory import build_config
from tests.fixture_paths import fixture_path, staging_source_dir


def test_load_staging_writes_one_bronze_version(tmp_path: Path) -> None:
    """All six extracts should land in a single bronze version."""
    config = build_config(tmp_path / "data")

    result = load_staging(staging_source_dir(), config)

    assert result.table_counts == {
        "crm_cust_info": 6,
        "crm_prd_info": 7,
        "crm_sales_details": 7,
        "erp_cust_az12": 4,
        "erp_loc_a101": 5,
        "erp_px_cat_g1v2": 3,
    }


def test_load_staging_missing_extract_leaves_no_version(tmp_path: Path) -> None:
    """A missing extract should fail before any version is written."""
    source_dir = tmp_path / "source"
    shutil.copytree(staging_source_dir(), source_dir)
    (source_dir / "source_erp" / "LOC_A101.csv").unlink()
    config = build_config(tmp_path / "data")

    with pytest.raises(SilverlineStagingError):
        load_staging(source_dir, config)

    assert SnapshotStore(config).list_versions("bronze") == []


def test_load_staging_honors_layout_override(tmp_path: Path) -> None:
    """Layout overrides should change where an extract is read from."""
    source_dir = tmp_path / "source"
    shutil.copytree(staging_source_dir(), source_dir)
    (source_dir / "crm").mkdir()
    (source_dir / "source_crm" / "cust_info.csv").rename(source_dir / "crm" / "customers.csv")
    layout = load_source_layout(str(fixture_path("layouts/renamed_customers.yaml")))

    result = load_staging(source_dir, build_config(tmp_path / "data"), layout)

    assert result.table_counts["crm_cust_info"] == 6
