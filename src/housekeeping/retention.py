"""Snapshot build retention sweep.

This module deletes files of old snapshot builds and then reconciles
the affected metadata documents. Each version is an isolated unit of
work: its failures are collected and the sweep moves on.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import CHECKSUM_EXTENSIONS, MAVEN_PACKAGE_TYPE, RETENTION_DISABLED
from core.errors import SnapkeepConfigError, SnapkeepError
from core.logging_config import get_logger
from core.types import (
    CancellationSignal,
    PackageFile,
    PackageVersion,
    SnapshotMetadata,
    SweepReport,
    VersionFailure,
)
from housekeeping.metadata_xml import (
    document_build_number,
    max_build_number,
    try_parse_build_number,
)
from housekeeping.reconciler import MetadataReconciler
from store.storage_protocol import PackageStorage

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RetentionPlan:
    """Files selected for deletion in one snapshot version.

    Attributes:
        version_id: Snapshot version id.
        max_build: Latest build number the threshold derives from.
        threshold: Builds strictly below this value are removed.
        selected: Files to delete, oldest build first.
        skipped: Artifact-like file names with no derivable build number.
    """

    version_id: int
    max_build: int
    threshold: int
    selected: tuple[PackageFile, ...]
    skipped: tuple[str, ...] = ()


class RetentionSweeper:
    """Removes snapshot builds beyond the retain count."""

    def __init__(self, storage: PackageStorage, reconciler: MetadataReconciler) -> None:
        self._storage = storage
        self._reconciler = reconciler

    def run(
        self,
        retain_builds: int,
        dry_run: bool = False,
        cancel_event: CancellationSignal | None = None,
    ) -> SweepReport:
        """Sweep every Maven snapshot version.

        Args:
            retain_builds: Latest builds to keep, or ``RETENTION_DISABLED``.
            dry_run: Compute selections without deleting or rewriting.
            cancel_event: Checked between versions; stops the sweep when set.

        Returns:
            Sweep report; ``report.error`` aggregates per-version failures.

        Raises:
            SnapkeepConfigError: If retain_builds is below 1 and not the disabled sentinel.
            SnapkeepError: If the version list cannot be read.
        """
        if retain_builds == RETENTION_DISABLED:
            _LOGGER.info("snapshot_sweep_disabled")
            return SweepReport(retain_builds=retain_builds, dry_run=dry_run)
        if retain_builds < 1:
            raise SnapkeepConfigError(
                f"Invalid retain_builds value {retain_builds}: expected at least 1, "
                f"or {RETENTION_DISABLED} to disable the snapshot sweep."
            )
        _LOGGER.debug("snapshot_sweep_started", retain_builds=retain_builds, dry_run=dry_run)
        versions = self._storage.list_versions(MAVEN_PACKAGE_TYPE)
        pruned_files: list[tuple[int, tuple[str, ...]]] = []
        reconciled: list[int] = []
        failures: list[VersionFailure] = []
        cancelled = False
        for version in versions:
            if not version.is_snapshot:
                continue
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                _LOGGER.warning("snapshot_sweep_cancelled", next_version_id=version.version_id)
                break
            removed, did_reconcile, errors = self._sweep_version(version, retain_builds, dry_run)
            if removed:
                pruned_files.append((version.version_id, removed))
            if did_reconcile:
                reconciled.append(version.version_id)
            failures.extend(
                VersionFailure(version.version_id, version.version, error) for error in errors
            )
        report = SweepReport(
            retain_builds=retain_builds,
            dry_run=dry_run,
            pruned_count=sum(len(names) for _, names in pruned_files),
            pruned_files=tuple(pruned_files),
            reconciled_versions=tuple(reconciled),
            failures=tuple(failures),
            cancelled=cancelled,
        )
        _log_report(report)
        return report

    def plan_version(self, version: PackageVersion, retain_builds: int) -> RetentionPlan:
        """Select the files of one version that fall below the threshold.

        Args:
            version: Snapshot version.
            retain_builds: Latest builds to keep.

        Returns:
            Retention plan; empty when the threshold is not positive.

        Raises:
            SnapkeepNotFoundError: If the metadata document is missing.
            SnapkeepParseError: If the metadata document is malformed.
            SnapkeepStorageError: If storage reads fail.
        """
        _, metadata = self._reconciler.load_metadata(version.version_id)
        max_build = document_build_number(metadata)
        if max_build is None:
            max_build = max_build_number(metadata.versioning.snapshot_versions)
        threshold = max_build - retain_builds
        if threshold <= 0:
            return RetentionPlan(version.version_id, max_build, threshold, ())
        files = self._storage.list_files(version.version_id)
        selected, skipped = select_files_below_threshold(
            files, metadata, version.base_version, threshold
        )
        return RetentionPlan(version.version_id, max_build, threshold, selected, skipped)

    def _sweep_version(
        self,
        version: PackageVersion,
        retain_builds: int,
        dry_run: bool,
    ) -> tuple[tuple[str, ...], bool, list[SnapkeepError]]:
        """Apply retention to one version.

        Returns:
            Removed (or would-be removed) names, whether the metadata was
            reconciled, and the errors raised on the way.
        """
        try:
            plan = self.plan_version(version, retain_builds)
        except SnapkeepError as error:
            return (), False, [error]
        if not plan.selected:
            _LOGGER.debug(
                "snapshot_sweep_nothing_to_remove",
                version_id=version.version_id,
                threshold=plan.threshold,
            )
            return (), False, []
        names = tuple(item.name for item in plan.selected)
        if dry_run:
            _LOGGER.info(
                "snapshot_sweep_dry_run_selection",
                version_id=version.version_id,
                threshold=plan.threshold,
                files_to_remove=list(names),
                skipped_files=list(plan.skipped),
            )
            return names, False, []
        removed: list[str] = []
        errors: list[SnapkeepError] = []
        for package_file in plan.selected:
            try:
                self._storage.delete_file(package_file)
            except SnapkeepError as error:
                _LOGGER.warning(
                    "snapshot_file_delete_failed",
                    version_id=version.version_id,
                    name=package_file.name,
                    error=str(error),
                )
                errors.append(error)
                break
            removed.append(package_file.name)
        if not removed:
            return (), False, errors
        try:
            self._reconciler.reconcile(version.version_id)
        except SnapkeepError as error:
            errors.append(error)
            return tuple(removed), False, errors
        return tuple(removed), True, errors


def select_files_below_threshold(
    files: list[PackageFile],
    metadata: SnapshotMetadata,
    base_version: str,
    threshold: int,
) -> tuple[tuple[PackageFile, ...], tuple[str, ...]]:
    """Select artifact files of builds strictly below the threshold.

    Only names of the form ``artifactId-<base>-<stamp>-<build><ending>``
    whose ending matches a classifier/extension pair listed in the
    document qualify. Checksum side-files follow their artifact.

    Args:
        files: Stored files of the version.
        metadata: Current metadata document.
        base_version: Version string without ``-SNAPSHOT``.
        threshold: Exclusive upper build bound.

    Returns:
        Selected files ordered by build then name, and skipped names.
    """
    entries = metadata.versioning.snapshot_versions
    endings = sorted(
        {entry.file_ending for entry in entries if entry.file_ending},
        key=len,
        reverse=True,
    )
    by_name = {item.name: item for item in files}
    candidates: list[tuple[int, PackageFile]] = []
    skipped: list[str] = []
    for package_file in files:
        if not package_file.name.startswith(f"{metadata.artifact_id}-{base_version}-"):
            continue
        matching = [ending for ending in endings if package_file.name.endswith(ending)]
        if not matching:
            continue
        build = derive_build_number(
            package_file.name, metadata.artifact_id, base_version, matching
        )
        if build is None:
            skipped.append(package_file.name)
            continue
        if build < threshold:
            candidates.append((build, package_file))
    selected: list[PackageFile] = []
    for _, package_file in sorted(candidates, key=lambda item: (item[0], item[1].name)):
        selected.append(package_file)
        for extension in CHECKSUM_EXTENSIONS:
            companion = by_name.get(package_file.name + extension)
            if companion is not None:
                selected.append(companion)
    return tuple(selected), tuple(skipped)


def derive_build_number(
    file_name: str,
    artifact_id: str,
    base_version: str,
    endings: list[str],
) -> int | None:
    """Return the build number encoded in an artifact file name.

    Args:
        file_name: Stored file name.
        artifact_id: Maven artifact id.
        base_version: Version string without ``-SNAPSHOT``.
        endings: Candidate ``[-classifier].extension`` suffixes, longest first.

    Returns:
        Build number, or None when no ending yields a well-formed value.
    """
    prefix = f"{artifact_id}-"
    for ending in endings:
        if not file_name.endswith(ending):
            continue
        value = file_name[len(prefix) : len(file_name) - len(ending)]
        if not value.startswith(f"{base_version}-"):
            continue
        build = try_parse_build_number(value)
        if build is not None:
            return build
    return None


def _log_report(report: SweepReport) -> None:
    for failure in report.failures:
        _LOGGER.warning(
            "snapshot_sweep_version_failed",
            version_id=failure.version_id,
            version=failure.version,
            error=str(failure.error),
        )
    if report.pruned_count:
        _LOGGER.info(
            "snapshot_sweep_completed",
            pruned_count=report.pruned_count,
            dry_run=report.dry_run,
            versions=[version_id for version_id, _ in report.pruned_files],
            failures=len(report.failures),
        )
    else:
        _LOGGER.debug("snapshot_sweep_completed", pruned_count=0, failures=len(report.failures))
