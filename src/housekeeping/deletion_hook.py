"""Post-deletion metadata hook.

This module reconciles a snapshot version right after one of its
artifact files was deleted elsewhere. Hook failures never undo the
deletion; the next global prune restores consistency.
"""

from __future__ import annotations

from core.constants import CHECKSUM_EXTENSIONS, METADATA_FILE_NAME, SIGNATURE_EXTENSIONS
from core.errors import SnapkeepError
from core.logging_config import get_logger
from core.types import DeletionHookResult, PackageFile
from housekeeping.reconciler import MetadataReconciler
from store.storage_protocol import PackageStorage

_LOGGER = get_logger(__name__)


class DeletionHook:
    """Deletion listener that keeps snapshot metadata in sync."""

    def __init__(
        self,
        storage: PackageStorage,
        reconciler: MetadataReconciler,
        dry_run: bool = False,
    ) -> None:
        self._storage = storage
        self._reconciler = reconciler
        self._dry_run = dry_run

    def on_file_deleted(self, file: PackageFile) -> DeletionHookResult:
        """Reconcile the version of a just-deleted artifact file.

        Args:
            file: File record whose deletion has already committed.

        Returns:
            Hook outcome; failures are carried in ``result.error``.
        """
        skip_reason = non_payload_reason(file.name)
        if skip_reason is not None:
            return DeletionHookResult(file.name, file.version_id, skipped_reason=skip_reason)
        try:
            version = self._storage.get_version(file.version_id)
            if not version.is_snapshot:
                return DeletionHookResult(
                    file.name, file.version_id, skipped_reason="not_snapshot_version"
                )
            result = self._reconciler.reconcile(file.version_id, dry_run=self._dry_run)
        except SnapkeepError as error:
            _LOGGER.warning(
                "deletion_hook_failed",
                version_id=file.version_id,
                name=file.name,
                error=str(error),
            )
            return DeletionHookResult(file.name, file.version_id, error=error)
        return DeletionHookResult(file.name, file.version_id, reconcile=result)


def non_payload_reason(file_name: str) -> str | None:
    """Return why a file is not listed in snapshot metadata, or None.

    The metadata document, checksum and signature side-files, and
    directory markers never appear as ``snapshotVersion`` entries.
    """
    if not file_name or file_name.endswith("/"):
        return "directory_marker"
    if file_name.startswith(METADATA_FILE_NAME):
        return "metadata_file"
    if file_name.endswith(CHECKSUM_EXTENSIONS + SIGNATURE_EXTENSIONS):
        return "side_file"
    return None
