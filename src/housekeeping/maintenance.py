"""Maintenance entry points.

This module wires storage, reconciler, sweeper, pruner, and deletion
hook together and exposes the triggers a scheduler calls. Configured
values are passed explicitly into each operation.
"""

from __future__ import annotations

from core.config import SnapkeepConfig
from core.types import (
    SYSTEM_ACTOR,
    Actor,
    CancellationSignal,
    DeletionHookResult,
    PackageFile,
    PruneReport,
    ReconcileResult,
    SweepReport,
)
from housekeeping.deletion_hook import DeletionHook
from housekeeping.global_prune import GlobalPruner
from housekeeping.reconciler import MetadataReconciler
from housekeeping.retention import RetentionSweeper
from store.file_service import PackageFileService
from store.file_storage import FilesystemPackageStorage
from store.storage_protocol import PackageStorage


class MaintenanceClient:
    """Primary entry point for scheduled snapshot maintenance."""

    def __init__(
        self,
        config: SnapkeepConfig | None = None,
        storage: PackageStorage | None = None,
        actor: Actor = SYSTEM_ACTOR,
    ) -> None:
        """Create maintenance client.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            storage: Optional storage collaborator; filesystem storage when omitted.
            actor: Writer of record for metadata rewrites.
        """
        self._config = config or SnapkeepConfig.from_env()
        self._storage = storage or FilesystemPackageStorage(self._config)
        self._reconciler = MetadataReconciler(self._storage, actor)
        self._sweeper = RetentionSweeper(self._storage, self._reconciler)
        self._pruner = GlobalPruner(self._storage, self._reconciler)
        self._hook = DeletionHook(
            self._storage,
            self._reconciler,
            dry_run=self._config.debug_metadata_prune,
        )
        self._files = PackageFileService(self._storage, listeners=(self._hook.on_file_deleted,))

    @property
    def storage(self) -> PackageStorage:
        """Storage collaborator used by every operation."""
        return self._storage

    def run_retention_sweep(
        self,
        retain_builds: int | None = None,
        dry_run: bool | None = None,
        cancel_event: CancellationSignal | None = None,
    ) -> SweepReport:
        """Run the retention sweep with configured or overridden values."""
        return self._sweeper.run(
            self._config.retain_snapshot_builds if retain_builds is None else retain_builds,
            dry_run=self._config.debug_snapshot_cleanup if dry_run is None else dry_run,
            cancel_event=cancel_event,
        )

    def run_global_prune(
        self,
        dry_run: bool | None = None,
        cancel_event: CancellationSignal | None = None,
    ) -> PruneReport:
        """Reconcile every snapshot version."""
        return self._pruner.run_all(
            dry_run=self._config.debug_metadata_prune if dry_run is None else dry_run,
            cancel_event=cancel_event,
        )

    def reconcile(self, version_id: int, dry_run: bool = False) -> ReconcileResult:
        """Reconcile a single version."""
        return self._reconciler.reconcile(version_id, dry_run=dry_run)

    def delete_file(self, version_id: int, name: str) -> DeletionHookResult:
        """Delete one file through the deletion path and return the hook outcome.

        Raises:
            SnapkeepNotFoundError: If the file does not exist.
            SnapkeepStorageError: If the deletion fails.
        """
        package_file = self._storage.get_file_by_name(version_id, name)
        (hook_result,) = self._files.delete_file(package_file)
        return hook_result
