"""Snapkeep exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Batch operations collect per-version errors into one aggregate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.types import VersionFailure


class SnapkeepError(Exception):
    """Base exception for all Snapkeep failures."""


class SnapkeepConfigError(SnapkeepError):
    """Raised for invalid runtime or retention configuration."""


class SnapkeepNotFoundError(SnapkeepError):
    """Raised when a version, file, metadata document, or blob is missing."""


class SnapkeepParseError(SnapkeepError):
    """Raised for malformed metadata XML or snapshot values."""


class SnapkeepStorageError(SnapkeepError):
    """Raised for blob read, file delete, or file write failures."""


class SnapkeepBatchError(SnapkeepError):
    """Aggregated per-version failures of one batch operation.

    Attributes:
        operation: Batch operation name, e.g. ``snapshot_sweep``.
        failures: Every recorded per-version failure, in processing order.
    """

    def __init__(self, operation: str, failures: tuple[VersionFailure, ...]) -> None:
        self.operation = operation
        self.failures = failures
        details = "; ".join(
            f"version '{failure.version}' (ID: {failure.version_id}): {failure.error}"
            for failure in failures
        )
        super().__init__(f"{operation} completed with {len(failures)} errors: {details}")
