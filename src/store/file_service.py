"""Package file deletion path.

This module deletes package files through storage and then notifies
deletion listeners synchronously. Listener outcomes never roll back a
committed deletion.
"""

from __future__ import annotations

from typing import Any, Callable

from core.logging_config import get_logger
from core.types import PackageFile
from store.storage_protocol import PackageStorage

DeletionListener = Callable[[PackageFile], Any]

_LOGGER = get_logger(__name__)


class PackageFileService:
    """Deletes package files and fans out deletion events."""

    def __init__(
        self,
        storage: PackageStorage,
        listeners: tuple[DeletionListener, ...] = (),
    ) -> None:
        self._storage = storage
        self._listeners = listeners

    def delete_file(self, file: PackageFile) -> tuple[Any, ...]:
        """Delete one file, then invoke every listener with it.

        Args:
            file: File record to delete.

        Returns:
            Listener return values, in registration order.

        Raises:
            SnapkeepNotFoundError: If the file is already gone.
            SnapkeepStorageError: If the deletion fails.
        """
        self._storage.delete_file(file)
        _LOGGER.info("package_file_removed", version_id=file.version_id, name=file.name)
        return tuple(listener(file) for listener in self._listeners)
