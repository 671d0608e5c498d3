"""Integration test for publish, delete, sweep, and prune cycles."""

from __future__ import annotations

from core.constants import METADATA_FILE_NAME
from core.types import SYSTEM_ACTOR
from housekeeping.maintenance import MaintenanceClient
from housekeeping.metadata_xml import parse_snapshot_metadata
from tests.snapshot_fixtures import (
    artifact_name,
    file_names,
    make_config,
    read_stored_metadata,
    seed_snapshot_version,
)


def test_snapshot_lifecycle_converges(tmp_path) -> None:
    """Hook, sweep, and prune should leave metadata matching stored files."""
    client = MaintenanceClient(make_config(tmp_path))
    storage = client.storage
    version = seed_snapshot_version(storage, builds=range(1, 11))

    hook_result = client.delete_file(version.version_id, artifact_name("1.0", 10, "", "pom"))
    sweep = client.run_retention_sweep(retain_builds=3)
    # Out-of-band deletion that bypasses the hook.
    storage.delete_file(
        storage.get_file_by_name(version.version_id, artifact_name("1.0", 9, "", "jar"))
    )
    prune = client.run_global_prune()
    second_prune = client.run_global_prune()
    stored = parse_snapshot_metadata(read_stored_metadata(storage, version.version_id))
    listed = {
        f"artifact-{entry.value}.{entry.extension}"
        for entry in stored.versioning.snapshot_versions
    }
    remaining = file_names(storage, version.version_id) - {METADATA_FILE_NAME}

    assert (
        hook_result.reconcile is not None
        and hook_result.reconcile.changed
        and sweep.pruned_count == 12
        and prune.changed_versions == (version.version_id,)
        and second_prune.changed_versions == ()
        and listed == remaining
        and stored.versioning.snapshot.build_number == "10"
    )


def test_sweep_and_prune_are_safe_to_rerun(tmp_path) -> None:
    """Re-running maintenance after a completed sweep should change nothing."""
    client = MaintenanceClient(make_config(tmp_path))
    version = seed_snapshot_version(client.storage, builds=range(1, 8))
    client.run_retention_sweep(retain_builds=2)
    after_first = read_stored_metadata(client.storage, version.version_id)

    rerun = client.run_retention_sweep(retain_builds=2)
    prune = client.run_global_prune()
    metadata_file = client.storage.get_file_by_name(version.version_id, METADATA_FILE_NAME)

    assert (
        rerun.pruned_count == 0
        and prune.changed_versions == ()
        and read_stored_metadata(client.storage, version.version_id) == after_first
        and client.storage.file_creator(metadata_file) == SYSTEM_ACTOR.name
    )
