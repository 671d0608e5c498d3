"""Filesystem-backed package storage.

This module persists package versions and file records in a JSON index
and file contents as content-addressed blobs. It implements the storage
contract consumed by the maintenance operations.
"""

from __future__ import annotations

import hashlib
import io
import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, BinaryIO, cast

from core.config import SnapkeepConfig
from core.constants import (
    BLOBS_DIR_NAME,
    HASH_ALGORITHM,
    INDEX_FILE_NAME,
    PACKAGES_DIR_NAME,
)
from core.errors import SnapkeepNotFoundError, SnapkeepStorageError
from core.logging_config import get_logger
from core.types import Actor, PackageFile, PackageVersion

_LOGGER = get_logger(__name__)


class FilesystemPackageStorage:
    """Package storage rooted at a local data directory.

    The index file holds every version and file record; blobs live
    under ``blobs/<first two hex chars>/<digest>`` and are removed once
    no file record references them.
    """

    def __init__(self, config: SnapkeepConfig) -> None:
        """Initialize storage from config.

        Args:
            config: Runtime configuration.
        """
        self._index_path = config.data_root / PACKAGES_DIR_NAME / INDEX_FILE_NAME
        self._blobs_root = config.data_root / BLOBS_DIR_NAME
        self._index_path.parent.mkdir(parents=True, exist_ok=True)
        self._blobs_root.mkdir(parents=True, exist_ok=True)

    def create_version(self, package_type: str, version: str) -> PackageVersion:
        """Register a new package version.

        Args:
            package_type: Package type, e.g. ``maven``.
            version: Version string.

        Returns:
            Persisted version record.
        """
        index = self._read_index()
        package_version = PackageVersion(
            version_id=int(index["next_version_id"]),
            package_type=package_type,
            version=version,
        )
        index["next_version_id"] = package_version.version_id + 1
        cast(list[dict[str, Any]], index["versions"]).append(asdict(package_version))
        self._write_index(index)
        return package_version

    def list_versions(self, package_type: str) -> list[PackageVersion]:
        """List versions of one package type ordered by id."""
        index = self._read_index()
        versions = [
            _version_from_dict(item)
            for item in cast(list[dict[str, Any]], index["versions"])
            if item["package_type"] == package_type
        ]
        return sorted(versions, key=lambda item: item.version_id)

    def get_version(self, version_id: int) -> PackageVersion:
        """Return one version.

        Raises:
            SnapkeepNotFoundError: If no version has the given id.
        """
        index = self._read_index()
        for item in cast(list[dict[str, Any]], index["versions"]):
            if int(item["version_id"]) == version_id:
                return _version_from_dict(item)
        raise SnapkeepNotFoundError(f"Package version {version_id} does not exist.")

    def list_files(self, version_id: int) -> list[PackageFile]:
        """List files of one version ordered by id."""
        index = self._read_index()
        files = [
            _file_from_dict(item)
            for item in cast(list[dict[str, Any]], index["files"])
            if int(item["version_id"]) == version_id
        ]
        return sorted(files, key=lambda item: item.file_id)

    def get_file_by_name(self, version_id: int, name: str) -> PackageFile:
        """Return one file by exact name.

        Raises:
            SnapkeepNotFoundError: If the version has no file with that name.
        """
        for package_file in self.list_files(version_id):
            if package_file.name == name:
                return package_file
        raise SnapkeepNotFoundError(
            f"File '{name}' does not exist for package version {version_id}."
        )

    def open_blob(self, blob_ref: str) -> BinaryIO:
        """Open a blob for reading.

        Raises:
            SnapkeepNotFoundError: If the blob is missing.
            SnapkeepStorageError: If the blob cannot be read.
        """
        blob_path = self._blob_path(blob_ref)
        if not blob_path.exists():
            raise SnapkeepNotFoundError(f"Blob {blob_ref} not found at {blob_path}.")
        try:
            return io.BytesIO(blob_path.read_bytes())
        except OSError as error:
            raise SnapkeepStorageError(f"Failed to read blob {blob_ref}: {error}") from error

    def delete_file(self, file: PackageFile) -> None:
        """Delete one file record and release its blob.

        Raises:
            SnapkeepNotFoundError: If the file record is already gone.
            SnapkeepStorageError: If the index cannot be read or written.
        """
        index = self._read_index()
        records = cast(list[dict[str, Any]], index["files"])
        remaining = [item for item in records if int(item["file_id"]) != file.file_id]
        if len(remaining) == len(records):
            raise SnapkeepNotFoundError(
                f"File '{file.name}' (ID: {file.file_id}) does not exist."
            )
        index["files"] = remaining
        self._write_index(index)
        if not any(item["blob_ref"] == file.blob_ref for item in remaining):
            self._remove_blob(file.blob_ref)
        _LOGGER.debug("package_file_deleted", version_id=file.version_id, name=file.name)

    def write_file(
        self,
        version_id: int,
        name: str,
        composite_key: str,
        content: bytes,
        overwrite: bool,
        actor: Actor,
    ) -> PackageFile:
        """Store file content for a version.

        Args:
            version_id: Owning version id.
            name: File name.
            composite_key: Secondary uniqueness key.
            content: File bytes.
            overwrite: Replace an existing file with the same name and key.
            actor: Writer of record.

        Returns:
            Persisted file record.

        Raises:
            SnapkeepNotFoundError: If the version does not exist.
            SnapkeepStorageError: If the file exists without overwrite or I/O fails.
        """
        self.get_version(version_id)
        blob_ref = self._store_blob(content)
        index = self._read_index()
        records = cast(list[dict[str, Any]], index["files"])
        existing = _find_record(records, version_id, name, composite_key)
        if existing is not None and not overwrite:
            raise SnapkeepStorageError(
                f"File '{name}' already exists for package version {version_id}. "
                "Pass overwrite=True to replace it."
            )
        if existing is None:
            file_id = int(index["next_file_id"])
            index["next_file_id"] = file_id + 1
            existing = {"file_id": file_id, "version_id": version_id, "name": name}
            records.append(existing)
        previous_blob = existing.get("blob_ref")
        existing.update(
            {
                "blob_ref": blob_ref,
                "composite_key": composite_key,
                "creator_id": actor.user_id,
                "creator": actor.name,
            }
        )
        self._write_index(index)
        if previous_blob and previous_blob != blob_ref:
            if not any(item["blob_ref"] == previous_blob for item in records):
                self._remove_blob(previous_blob)
        _LOGGER.debug(
            "package_file_written",
            version_id=version_id,
            name=name,
            creator=actor.name,
            overwrite=overwrite,
        )
        return _file_from_dict(existing)

    def file_creator(self, file: PackageFile) -> str | None:
        """Return the writer-of-record name stored for a file."""
        index = self._read_index()
        for item in cast(list[dict[str, Any]], index["files"]):
            if int(item["file_id"]) == file.file_id:
                return cast(str | None, item.get("creator"))
        return None

    def _blob_path(self, blob_ref: str) -> Path:
        return self._blobs_root / blob_ref[:2] / blob_ref

    def _store_blob(self, content: bytes) -> str:
        """Write content to its content-addressed location.

        Args:
            content: Blob bytes.

        Returns:
            Blob reference (hex digest).

        Raises:
            SnapkeepStorageError: If the blob cannot be written.
        """
        blob_ref = hashlib.new(HASH_ALGORITHM, content).hexdigest()
        blob_path = self._blob_path(blob_ref)
        if blob_path.exists():
            return blob_ref
        try:
            blob_path.parent.mkdir(parents=True, exist_ok=True)
            blob_path.write_bytes(content)
        except OSError as error:
            raise SnapkeepStorageError(f"Failed to write blob {blob_ref}: {error}") from error
        return blob_ref

    def _remove_blob(self, blob_ref: str) -> None:
        # Runs after the index commit; a failure leaves an unreferenced blob behind.
        try:
            self._blob_path(blob_ref).unlink(missing_ok=True)
        except OSError as error:
            _LOGGER.warning("blob_remove_failed", blob_ref=blob_ref, error=str(error))

    def _read_index(self) -> dict[str, Any]:
        """Read the package index, creating an empty one when absent.

        Raises:
            SnapkeepStorageError: If the index is unreadable or malformed.
        """
        if not self._index_path.exists():
            return {"next_version_id": 1, "next_file_id": 1, "versions": [], "files": []}
        try:
            payload = json.loads(self._index_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise SnapkeepStorageError(
                f"Failed to read package index at {self._index_path}: {error}."
            ) from error
        if not isinstance(payload, dict):
            raise SnapkeepStorageError(
                f"Failed to read package index at {self._index_path}: "
                "expected JSON object at top level."
            )
        return payload

    def _write_index(self, index: dict[str, Any]) -> None:
        temp_path = self._index_path.with_suffix(".tmp")
        try:
            temp_path.write_text(json.dumps(index, indent=2) + "\n", encoding="utf-8")
            os.replace(temp_path, self._index_path)
        except OSError as error:
            raise SnapkeepStorageError(
                f"Failed to write package index at {self._index_path}: {error}"
            ) from error


def _find_record(
    records: list[dict[str, Any]],
    version_id: int,
    name: str,
    composite_key: str,
) -> dict[str, Any] | None:
    for item in records:
        if (
            int(item["version_id"]) == version_id
            and item["name"] == name
            and item.get("composite_key", "") == composite_key
        ):
            return item
    return None


def _version_from_dict(payload: dict[str, Any]) -> PackageVersion:
    return PackageVersion(
        version_id=int(payload["version_id"]),
        package_type=str(payload["package_type"]),
        version=str(payload["version"]),
    )


def _file_from_dict(payload: dict[str, Any]) -> PackageFile:
    return PackageFile(
        file_id=int(payload["file_id"]),
        version_id=int(payload["version_id"]),
        name=str(payload["name"]),
        blob_ref=str(payload["blob_ref"]),
        composite_key=str(payload.get("composite_key", "")),
    )
