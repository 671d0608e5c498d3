"""Shared typed models.

This module defines immutable data models used by the storage layer,
the metadata codec, and the maintenance operations to keep interfaces
explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from core.constants import SNAPSHOT_SUFFIX, SYSTEM_ACTOR_ID, SYSTEM_ACTOR_NAME
from core.errors import SnapkeepBatchError, SnapkeepError


@dataclass(frozen=True)
class PackageVersion:
    """One published version of a package.

    Attributes:
        version_id: Storage identifier of the version.
        package_type: Package type, e.g. ``maven``.
        version: Version string as published.
    """

    version_id: int
    package_type: str
    version: str

    @property
    def is_snapshot(self) -> bool:
        """Return whether this is a Maven snapshot version."""
        return is_snapshot_version(self.version)

    @property
    def base_version(self) -> str:
        """Return the version string without the snapshot suffix."""
        if self.is_snapshot:
            return self.version[: -len(SNAPSHOT_SUFFIX)]
        return self.version


@dataclass(frozen=True)
class PackageFile:
    """One stored file of a package version.

    Attributes:
        file_id: Storage identifier of the file.
        version_id: Owning version identifier.
        name: File name, ``artifactId-value[-classifier].extension`` for artifacts.
        blob_ref: Content address of the file blob.
        composite_key: Secondary uniqueness key used when writing files.
    """

    file_id: int
    version_id: int
    name: str
    blob_ref: str
    composite_key: str = ""


@dataclass(frozen=True)
class Actor:
    """Writer of record for storage writes."""

    user_id: int
    name: str


SYSTEM_ACTOR = Actor(user_id=SYSTEM_ACTOR_ID, name=SYSTEM_ACTOR_NAME)


@dataclass(frozen=True)
class SnapshotVersion:
    """One ``snapshotVersion`` entry of a metadata document.

    Attributes:
        classifier: Optional artifact classifier, empty when absent.
        extension: Artifact file extension without the dot.
        value: Timestamped snapshot value, e.g. ``1.0-20240101.120000-7``.
        updated: Optional last-update stamp, empty when absent.
    """

    classifier: str
    extension: str
    value: str
    updated: str = ""

    @property
    def file_ending(self) -> str:
        """Return the ``[-classifier].extension`` suffix of the file name."""
        ending = f"-{self.classifier}" if self.classifier else ""
        if self.extension:
            ending += f".{self.extension}"
        return ending


@dataclass(frozen=True)
class SnapshotInfo:
    """The ``snapshot`` block naming the latest build."""

    timestamp: str
    build_number: str


@dataclass(frozen=True)
class Versioning:
    """The ``versioning`` block of a metadata document."""

    snapshot: SnapshotInfo
    snapshot_versions: tuple[SnapshotVersion, ...]
    last_updated: str = ""


@dataclass(frozen=True)
class SnapshotMetadata:
    """Parsed per-version ``maven-metadata.xml`` document.

    Attributes:
        artifact_id: Maven artifact identifier.
        versioning: Snapshot and entry listing.
        group_id: Optional Maven group identifier.
        version: Optional snapshot version string.
        model_version: Optional ``modelVersion`` root attribute.
    """

    artifact_id: str
    versioning: Versioning
    group_id: str = ""
    version: str = ""
    model_version: str = ""


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one version's metadata document.

    Attributes:
        version_id: Reconciled version identifier.
        changed: Whether any entry was dropped.
        written: Whether the rewritten document was stored.
        removed_entries: Entries dropped as orphans, in document order.
        build_number: Build number of the reconciled document; the stored
            value when nothing changed, the recomputed one otherwise.
    """

    version_id: int
    changed: bool
    written: bool
    removed_entries: tuple[SnapshotVersion, ...]
    build_number: int


@dataclass(frozen=True)
class VersionFailure:
    """One failed per-version unit of work inside a batch."""

    version_id: int
    version: str
    error: SnapkeepError


@dataclass(frozen=True)
class SweepReport:
    """Result of one retention sweep.

    Attributes:
        retain_builds: Retain count the sweep ran with.
        dry_run: Whether deletions were only computed.
        pruned_count: Files removed, or that would be removed in dry run.
        pruned_files: Names of those files, per version id.
        reconciled_versions: Version ids whose metadata was reconciled.
        failures: Per-version failures in processing order.
        cancelled: Whether the run stopped early on a cancellation signal.
    """

    retain_builds: int
    dry_run: bool
    pruned_count: int = 0
    pruned_files: tuple[tuple[int, tuple[str, ...]], ...] = ()
    reconciled_versions: tuple[int, ...] = ()
    failures: tuple[VersionFailure, ...] = ()
    cancelled: bool = False

    @property
    def error(self) -> SnapkeepBatchError | None:
        """Aggregate of every per-version failure, or None."""
        if not self.failures:
            return None
        return SnapkeepBatchError("snapshot_sweep", self.failures)


@dataclass(frozen=True)
class PruneReport:
    """Result of one global metadata prune.

    Attributes:
        dry_run: Whether rewrites were only computed.
        checked_count: Snapshot versions processed.
        changed_versions: Version ids whose document changed.
        failures: Per-version failures in processing order.
        cancelled: Whether the run stopped early on a cancellation signal.
    """

    dry_run: bool
    checked_count: int = 0
    changed_versions: tuple[int, ...] = ()
    failures: tuple[VersionFailure, ...] = ()
    cancelled: bool = False

    @property
    def error(self) -> SnapkeepBatchError | None:
        """Aggregate of every per-version failure, or None."""
        if not self.failures:
            return None
        return SnapkeepBatchError("metadata_prune", self.failures)


@dataclass(frozen=True)
class DeletionHookResult:
    """Outcome of the post-deletion hook for one file.

    Attributes:
        file_name: Deleted file name.
        version_id: Owning version identifier.
        skipped_reason: Why reconciliation was skipped, if it was.
        reconcile: Reconciliation outcome when it ran and succeeded.
        error: Non-fatal failure raised while reconciling.
    """

    file_name: str
    version_id: int
    skipped_reason: str | None = None
    reconcile: ReconcileResult | None = None
    error: SnapkeepError | None = None


class CancellationSignal(Protocol):
    """Anything exposing ``is_set``, e.g. ``threading.Event``."""

    def is_set(self) -> bool:
        ...


def is_snapshot_version(version: str) -> bool:
    """Return whether a version string names a snapshot."""
    return version.endswith(SNAPSHOT_SUFFIX)
