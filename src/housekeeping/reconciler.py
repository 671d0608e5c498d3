"""Snapshot metadata reconciliation.

This module drops metadata entries whose backing files are gone,
recomputes the latest build, and rewrites the stored document only
when its entry list changed. Re-running it is always safe.
"""

from __future__ import annotations

from dataclasses import replace

from core.constants import METADATA_FILE_NAME
from core.errors import SnapkeepStorageError
from core.logging_config import get_logger
from core.types import (
    Actor,
    PackageFile,
    ReconcileResult,
    SnapshotMetadata,
    SnapshotVersion,
)
from housekeeping.metadata_xml import (
    document_build_number,
    expected_file_name,
    parse_snapshot_metadata,
    serialize_snapshot_metadata,
    snapshot_timestamp,
    try_parse_build_number,
)
from store.storage_protocol import PackageStorage

_LOGGER = get_logger(__name__)


class MetadataReconciler:
    """Reconciles one version's ``maven-metadata.xml`` against its files.

    Entries whose value has no parseable build number are kept as long
    as their file exists; they never count toward the build number.
    """

    def __init__(self, storage: PackageStorage, actor: Actor) -> None:
        """Initialize reconciler.

        Args:
            storage: Storage collaborator.
            actor: Writer of record for metadata rewrites.
        """
        self._storage = storage
        self._actor = actor

    def load_metadata(self, version_id: int) -> tuple[PackageFile, SnapshotMetadata]:
        """Fetch and parse the stored metadata document of a version.

        Args:
            version_id: Snapshot version id.

        Returns:
            Pair of metadata file record and parsed document.

        Raises:
            SnapkeepNotFoundError: If the document or its blob is missing.
            SnapkeepParseError: If the document is malformed.
            SnapkeepStorageError: If the blob cannot be read.
        """
        metadata_file = self._storage.get_file_by_name(version_id, METADATA_FILE_NAME)
        stream = self._storage.open_blob(metadata_file.blob_ref)
        try:
            content = stream.read()
        except OSError as error:
            raise SnapkeepStorageError(
                f"Failed to read {METADATA_FILE_NAME} of version {version_id}: {error}"
            ) from error
        finally:
            stream.close()
        return metadata_file, parse_snapshot_metadata(content)

    def reconcile(self, version_id: int, dry_run: bool = False) -> ReconcileResult:
        """Drop orphan entries and rewrite the document when it changed.

        Args:
            version_id: Snapshot version id.
            dry_run: Compute the outcome without writing.

        Returns:
            Reconciliation outcome.

        Raises:
            SnapkeepNotFoundError: If the document or its blob is missing.
            SnapkeepParseError: If the document is malformed.
            SnapkeepStorageError: If reading or writing fails.
        """
        metadata_file, metadata = self.load_metadata(version_id)
        existing_names = {item.name for item in self._storage.list_files(version_id)}
        entries = metadata.versioning.snapshot_versions
        kept = tuple(
            entry
            for entry in entries
            if expected_file_name(metadata.artifact_id, entry) in existing_names
        )
        if kept == entries:
            return ReconcileResult(
                version_id=version_id,
                changed=False,
                written=False,
                removed_entries=(),
                build_number=_declared_or_latest_build(metadata),
            )
        removed = tuple(entry for entry in entries if entry not in kept)
        updated = rebuild_metadata(metadata, kept)
        build_number = int(updated.versioning.snapshot.build_number)
        if dry_run:
            _LOGGER.info(
                "metadata_rewrite_skipped_dry_run",
                version_id=version_id,
                removed_entries=len(removed),
                build_number=build_number,
            )
            return ReconcileResult(version_id, True, False, removed, build_number)
        self._storage.write_file(
            version_id,
            metadata_file.name,
            metadata_file.composite_key,
            serialize_snapshot_metadata(updated),
            overwrite=True,
            actor=self._actor,
        )
        _LOGGER.info(
            "metadata_rewritten",
            version_id=version_id,
            removed_entries=len(removed),
            build_number=build_number,
            actor=self._actor.name,
        )
        return ReconcileResult(version_id, True, True, removed, build_number)


def rebuild_metadata(
    metadata: SnapshotMetadata,
    kept: tuple[SnapshotVersion, ...],
) -> SnapshotMetadata:
    """Return a new document listing only the kept entries.

    The build number becomes the highest parseable build among kept
    entries (0 when none) and the snapshot timestamp follows the entry
    carrying it.

    Args:
        metadata: Current document.
        kept: Entries to retain, in document order.

    Returns:
        Rebuilt document; the input is left untouched.
    """
    build_number, timestamp = _latest_build(kept)
    snapshot = replace(
        metadata.versioning.snapshot,
        build_number=str(build_number),
        timestamp=timestamp or metadata.versioning.snapshot.timestamp,
    )
    versioning = replace(metadata.versioning, snapshot=snapshot, snapshot_versions=kept)
    return replace(metadata, versioning=versioning)


def _latest_build(entries: tuple[SnapshotVersion, ...]) -> tuple[int, str | None]:
    best_build = 0
    best_timestamp: str | None = None
    for entry in entries:
        build = try_parse_build_number(entry.value)
        if build is None or build < best_build:
            continue
        if build > best_build or best_timestamp is None:
            best_timestamp = snapshot_timestamp(entry.value)
        best_build = build
    return best_build, best_timestamp


def _declared_or_latest_build(metadata: SnapshotMetadata) -> int:
    declared = document_build_number(metadata)
    if declared is not None:
        return declared
    return _latest_build(metadata.versioning.snapshot_versions)[0]
