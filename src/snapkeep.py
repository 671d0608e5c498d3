"""Public SDK surface for Snapkeep.

This module provides a stable import path for scheduler integrations.
It re-exports the maintenance client, components, and typed results.
"""

from __future__ import annotations

from core.config import SnapkeepConfig
from core.types import (
    SYSTEM_ACTOR,
    Actor,
    DeletionHookResult,
    PackageFile,
    PackageVersion,
    PruneReport,
    ReconcileResult,
    SweepReport,
)
from housekeeping.deletion_hook import DeletionHook
from housekeeping.global_prune import GlobalPruner
from housekeeping.maintenance import MaintenanceClient
from housekeeping.reconciler import MetadataReconciler
from housekeeping.retention import RetentionSweeper
from store.file_storage import FilesystemPackageStorage

__all__ = [
    "Actor",
    "DeletionHook",
    "DeletionHookResult",
    "FilesystemPackageStorage",
    "GlobalPruner",
    "MaintenanceClient",
    "MetadataReconciler",
    "PackageFile",
    "PackageVersion",
    "PruneReport",
    "ReconcileResult",
    "RetentionSweeper",
    "SYSTEM_ACTOR",
    "SnapkeepConfig",
    "SweepReport",
]
