"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ENV_VARIABLES = (
    "SILVERLINE_DATA_ROOT",
    "SILVERLINE_REFERENCE_DATE",
    "SILVERLINE_COLUMNAR_EXPORT",
    "SILVERLINE_S3_REGION",
    "SILVERLINE_S3_PROFILE",
    "SILVERLINE_RETAIN_VERSIONS",
)


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _clear_silverline_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host SILVERLINE_* settings out of test runs."""
    for name in _ENV_VARIABLES:
        monkeypatch.delenv(name, raising=False)
