"""Unit tests for the global metadata prune."""

from __future__ import annotations

import threading
from dataclasses import replace

from core.constants import MAVEN_PACKAGE_TYPE, METADATA_FILE_NAME
from core.errors import SnapkeepBatchError, SnapkeepParseError
from core.types import SYSTEM_ACTOR, SnapshotInfo, SnapshotVersion
from housekeeping.global_prune import GlobalPruner
from housekeeping.metadata_xml import parse_snapshot_metadata, serialize_snapshot_metadata
from housekeeping.reconciler import MetadataReconciler
from tests.snapshot_fixtures import (
    artifact_name,
    build_metadata,
    make_storage,
    read_stored_metadata,
    seed_snapshot_version,
)


def _pruner(storage) -> GlobalPruner:
    return GlobalPruner(storage, MetadataReconciler(storage, SYSTEM_ACTOR))


def test_run_all_repairs_drifted_versions_only(tmp_path) -> None:
    """Only versions with orphan entries should be rewritten."""
    storage = make_storage(tmp_path)
    drifted = seed_snapshot_version(storage, version="1.0-SNAPSHOT", builds=range(1, 4))
    in_sync = seed_snapshot_version(storage, version="2.0-SNAPSHOT", builds=range(1, 4))
    storage.delete_file(
        storage.get_file_by_name(drifted.version_id, artifact_name("1.0", 3, "", "jar"))
    )
    storage.delete_file(
        storage.get_file_by_name(drifted.version_id, artifact_name("1.0", 3, "", "pom"))
    )
    in_sync_before = read_stored_metadata(storage, in_sync.version_id)

    report = _pruner(storage).run_all()
    repaired = parse_snapshot_metadata(read_stored_metadata(storage, drifted.version_id))

    assert (
        report.error is None
        and report.checked_count == 2
        and report.changed_versions == (drifted.version_id,)
        and repaired.versioning.snapshot.build_number == "2"
        and read_stored_metadata(storage, in_sync.version_id) == in_sync_before
    )


def test_run_all_collects_failures_and_continues(tmp_path) -> None:
    """A malformed document should be reported while later versions are repaired."""
    storage = make_storage(tmp_path)
    broken = storage.create_version(MAVEN_PACKAGE_TYPE, "0.1-SNAPSHOT")
    storage.write_file(broken.version_id, METADATA_FILE_NAME, "", b"not xml", True, SYSTEM_ACTOR)
    drifted = seed_snapshot_version(storage, version="1.0-SNAPSHOT", builds=[1, 2])
    storage.delete_file(
        storage.get_file_by_name(drifted.version_id, artifact_name("1.0", 1, "", "jar"))
    )

    report = _pruner(storage).run_all()

    assert (
        isinstance(report.error, SnapkeepBatchError)
        and isinstance(report.failures[0].error, SnapkeepParseError)
        and report.changed_versions == (drifted.version_id,)
        and "metadata_prune completed with 1 errors" in str(report.error)
    )


def test_run_all_dry_run_leaves_documents_untouched(tmp_path) -> None:
    """Dry run should list changed versions without rewriting them."""
    storage = make_storage(tmp_path)
    drifted = seed_snapshot_version(storage, builds=[1, 2])
    storage.delete_file(
        storage.get_file_by_name(drifted.version_id, artifact_name("1.0", 2, "", "jar"))
    )
    before = read_stored_metadata(storage, drifted.version_id)

    report = _pruner(storage).run_all(dry_run=True)

    assert (
        report.changed_versions == (drifted.version_id,)
        and read_stored_metadata(storage, drifted.version_id) == before
    )


def test_run_all_skips_release_versions_and_honors_cancellation(tmp_path) -> None:
    """Release versions are ignored and a set signal stops before any work."""
    storage = make_storage(tmp_path)
    storage.create_version(MAVEN_PACKAGE_TYPE, "1.0")
    seed_snapshot_version(storage, version="1.1-SNAPSHOT", builds=[1])
    cancel_event = threading.Event()
    cancel_event.set()

    uncancelled = _pruner(storage).run_all()
    cancelled = _pruner(storage).run_all(cancel_event=cancel_event)

    assert (
        uncancelled.checked_count == 1
        and cancelled.cancelled
        and cancelled.checked_count == 0
    )


def test_run_all_survives_oversized_build_suffix(tmp_path) -> None:
    """A value with an unconvertible build suffix should not stop other versions."""
    storage = make_storage(tmp_path)
    odd = storage.create_version(MAVEN_PACKAGE_TYPE, "0.1-SNAPSHOT")
    odd_value = f"0.1-x-{'9' * 5000}"
    odd_metadata = build_metadata("0.1", [])
    odd_metadata = replace(
        odd_metadata,
        versioning=replace(
            odd_metadata.versioning,
            snapshot=SnapshotInfo(timestamp="", build_number=""),
            snapshot_versions=(SnapshotVersion("", "jar", odd_value),),
        ),
    )
    storage.write_file(odd.version_id, f"artifact-{odd_value}.jar", "", b"x", True, SYSTEM_ACTOR)
    storage.write_file(
        odd.version_id,
        METADATA_FILE_NAME,
        "",
        serialize_snapshot_metadata(odd_metadata),
        True,
        SYSTEM_ACTOR,
    )
    drifted = seed_snapshot_version(storage, version="1.0-SNAPSHOT", builds=[1, 2])
    storage.delete_file(
        storage.get_file_by_name(drifted.version_id, artifact_name("1.0", 2, "", "pom"))
    )

    report = _pruner(storage).run_all()

    assert (
        report.error is None
        and report.checked_count == 2
        and report.changed_versions == (drifted.version_id,)
    )
