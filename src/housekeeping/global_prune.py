"""Global snapshot metadata prune.

This module reconciles every Maven snapshot version to repair documents
that drifted from storage: deletions that bypassed the hook, crashes
between deletion and rewrite, or migrated data.
"""

from __future__ import annotations

from core.constants import MAVEN_PACKAGE_TYPE
from core.errors import SnapkeepError
from core.logging_config import get_logger
from core.types import CancellationSignal, PruneReport, VersionFailure
from housekeeping.reconciler import MetadataReconciler
from store.storage_protocol import PackageStorage

_LOGGER = get_logger(__name__)


class GlobalPruner:
    """Runs metadata reconciliation over every snapshot version."""

    def __init__(self, storage: PackageStorage, reconciler: MetadataReconciler) -> None:
        self._storage = storage
        self._reconciler = reconciler

    def run_all(
        self,
        dry_run: bool = False,
        cancel_event: CancellationSignal | None = None,
    ) -> PruneReport:
        """Reconcile each snapshot version, isolating per-version failures.

        Args:
            dry_run: Compute changes without rewriting documents.
            cancel_event: Checked between versions; stops the prune when set.

        Returns:
            Prune report; ``report.error`` aggregates per-version failures.

        Raises:
            SnapkeepError: If the version list cannot be read.
        """
        _LOGGER.debug("metadata_prune_started", dry_run=dry_run)
        versions = self._storage.list_versions(MAVEN_PACKAGE_TYPE)
        checked = 0
        changed: list[int] = []
        failures: list[VersionFailure] = []
        cancelled = False
        for version in versions:
            if not version.is_snapshot:
                continue
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                _LOGGER.warning("metadata_prune_cancelled", next_version_id=version.version_id)
                break
            checked += 1
            try:
                result = self._reconciler.reconcile(version.version_id, dry_run=dry_run)
            except SnapkeepError as error:
                failures.append(VersionFailure(version.version_id, version.version, error))
                continue
            if result.changed:
                changed.append(version.version_id)
        report = PruneReport(
            dry_run=dry_run,
            checked_count=checked,
            changed_versions=tuple(changed),
            failures=tuple(failures),
            cancelled=cancelled,
        )
        for failure in report.failures:
            _LOGGER.warning(
                "metadata_prune_version_failed",
                version_id=failure.version_id,
                version=failure.version,
                error=str(failure.error),
            )
        if report.changed_versions:
            _LOGGER.info(
                "metadata_prune_completed",
                changed_versions=list(report.changed_versions),
                dry_run=dry_run,
            )
        else:
            _LOGGER.debug("metadata_prune_completed", changed_versions=[], checked=checked)
        return report
