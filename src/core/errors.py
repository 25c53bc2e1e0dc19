"""Silverline exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations

from typing import Mapping


class SilverlineError(Exception):
    """Base exception for all Silverline failures."""


class SilverlineConfigError(SilverlineError):
    """Raised for invalid runtime configuration."""


class SilverlineStagingError(SilverlineError):
    """Raised for source extract parsing and staging load failures."""


class SilverlineTransformError(SilverlineError):
    """Raised for transform pipeline failures."""


class RecordRejectedError(SilverlineTransformError):
    """Raised when one staged row cannot be coerced into a curated record.

    Attributes:
        reason: Short machine-friendly rejection reason.
        column: Source column that failed coercion, when known.
    """

    def __init__(self, reason: str, column: str | None = None, detail: str = "") -> None:
        self.reason = reason
        self.column = column
        message = reason if column is None else f"{reason} ({column})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SilverlineStoreError(SilverlineError):
    """Raised for layer store and versioning failures."""


class SilverlineDependencyError(SilverlineError):
    """Raised when an optional runtime dependency is missing."""


class SilverlineAuditError(SilverlineError):
    """Raised when the validation audit cannot run."""


class SilverlineLoadError(SilverlineError):
    """Raised when a batch load fails for one entity and phase.

    Attributes:
        entity: Table name that was being processed, ``*`` for batch scope.
        phase: Load phase, e.g. ``read_staging``, ``transform`` or ``write``.
        context: Extra diagnostic fields.
    """

    def __init__(
        self,
        entity: str,
        phase: str,
        message: str,
        context: Mapping[str, object] | None = None,
    ) -> None:
        self.entity = entity
        self.phase = phase
        self.context = dict(context or {})
        super().__init__(f"entity={entity} phase={phase}: {message}")
