"""Storage collaborator contract.

Maintenance operations reach package storage only through this protocol.
Implementations raise SnapkeepNotFoundError for missing records and
SnapkeepStorageError for I/O failures.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol

from core.types import Actor, PackageFile, PackageVersion


class PackageStorage(Protocol):
    """Version, file, and blob operations consumed by maintenance jobs."""

    def list_versions(self, package_type: str) -> list[PackageVersion]:
        """List every version of the given package type."""
        ...

    def get_version(self, version_id: int) -> PackageVersion:
        """Return one version or raise SnapkeepNotFoundError."""
        ...

    def list_files(self, version_id: int) -> list[PackageFile]:
        """List the files currently stored for a version."""
        ...

    def get_file_by_name(self, version_id: int, name: str) -> PackageFile:
        """Return one file by exact name or raise SnapkeepNotFoundError."""
        ...

    def open_blob(self, blob_ref: str) -> BinaryIO:
        """Open a blob for reading; the caller closes the stream."""
        ...

    def delete_file(self, file: PackageFile) -> None:
        """Delete one file record and its blob reference."""
        ...

    def write_file(
        self,
        version_id: int,
        name: str,
        composite_key: str,
        content: bytes,
        overwrite: bool,
        actor: Actor,
    ) -> PackageFile:
        """Store file content, replacing an existing file when overwrite is set."""
        ...
