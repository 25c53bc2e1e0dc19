"""Public SDK surface for Silverline.

This module provides a stable import path for SDK users.
It re-exports the primary client and typed result models.
"""

from __future__ import annotations

from core.audit_types import AuditFinding, AuditReport
from core.config import SilverlineConfig
from core.errors import RecordRejectedError, SilverlineError, SilverlineLoadError
from core.types import (
    CategoryRecord,
    CuratedLoadResult,
    CustomerRecord,
    DemographicRecord,
    LocationRecord,
    ProductRecord,
    RejectedRow,
    SalesRecord,
    StagingLoadResult,
)
from store.warehouse_sdk import Layer, SilverlineClient

__all__ = [
    "AuditFinding",
    "AuditReport",
    "CategoryRecord",
    "CuratedLoadResult",
    "CustomerRecord",
    "DemographicRecord",
    "Layer",
    "LocationRecord",
    "ProductRecord",
    "RecordRejectedError",
    "RejectedRow",
    "SalesRecord",
    "SilverlineClient",
    "SilverlineConfig",
    "SilverlineError",
    "SilverlineLoadError",
    "StagingLoadResult",
]
