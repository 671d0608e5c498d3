"""Unit tests for CLI command handling."""

from __future__ import annotations

import pytest

from cli.main import main
from core.constants import METADATA_FILE_NAME
from tests.snapshot_fixtures import artifact_name, file_names, make_storage, seed_snapshot_version


@pytest.fixture(autouse=True)
def _clear_snapkeep_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SNAPKEEP_RETAIN_SNAPSHOT_BUILDS",
        "SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP",
        "SNAPKEEP_DEBUG_METADATA_PRUNE",
        "SNAPKEEP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_cli_sweep_prints_report(tmp_path, capsys) -> None:
    """CLI sweep should delete old builds and print the pruned count."""
    storage = make_storage(tmp_path)
    version = seed_snapshot_version(storage, builds=range(1, 6), pairs=(("", "jar"),))

    exit_code = main(["--data-root", str(tmp_path), "sweep", "--retain-builds", "2"])
    output = capsys.readouterr().out

    assert (
        exit_code == 0
        and "pruned=2" in output
        and artifact_name("1.0", 1, "", "jar") not in file_names(storage, version.version_id)
    )


def test_cli_sweep_uses_configured_retain_count(tmp_path, capsys, monkeypatch) -> None:
    """Without an override the sweep should read the configured retain count."""
    monkeypatch.setenv("SNAPKEEP_RETAIN_SNAPSHOT_BUILDS", "2")
    monkeypatch.setenv("SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP", "true")
    storage = make_storage(tmp_path)
    version = seed_snapshot_version(storage, builds=range(1, 6), pairs=(("", "jar"),))
    names_before = file_names(storage, version.version_id)

    exit_code = main(["--data-root", str(tmp_path), "sweep"])
    output = capsys.readouterr().out

    assert (
        exit_code == 0
        and "dry_run=true" in output
        and "pruned=2" in output
        and file_names(storage, version.version_id) == names_before
    )


def test_cli_sweep_rejects_invalid_retain_count(tmp_path, capsys) -> None:
    """A sub-minimum retain count should exit with a configuration error."""
    exit_code = main(["--data-root", str(tmp_path), "sweep", "--retain-builds", "0"])

    assert exit_code == 2 and "config_error=" in capsys.readouterr().out


def test_cli_prune_reports_failures_with_exit_code(tmp_path, capsys) -> None:
    """A version missing metadata should make prune exit with 1."""
    storage = make_storage(tmp_path)
    storage.create_version("maven", "1.0-SNAPSHOT")

    exit_code = main(["--data-root", str(tmp_path), "prune"])
    output = capsys.readouterr().out

    assert exit_code == 1 and "failed=1" in output


def test_cli_delete_file_reconciles_metadata(tmp_path, capsys) -> None:
    """delete-file should remove the file and reconcile its version."""
    storage = make_storage(tmp_path)
    version = seed_snapshot_version(storage, builds=[1, 2], pairs=(("", "jar"),))
    name = artifact_name("1.0", 2, "", "jar")

    exit_code = main(["--data-root", str(tmp_path), "delete-file", str(version.version_id), name])
    output = capsys.readouterr().out

    assert (
        exit_code == 0
        and "metadata_changed=true" in output
        and name not in file_names(storage, version.version_id)
    )


def test_cli_reconcile_and_versions(tmp_path, capsys) -> None:
    """reconcile and versions commands should print their results."""
    storage = make_storage(tmp_path)
    version = seed_snapshot_version(storage, builds=[1], pairs=(("", "jar"),))

    reconcile_code = main(["--data-root", str(tmp_path), "reconcile", str(version.version_id)])
    versions_code = main(["--data-root", str(tmp_path), "versions"])
    output = capsys.readouterr().out

    assert (
        reconcile_code == 0
        and versions_code == 0
        and "changed=false" in output
        and f"{version.version_id}\t1.0-SNAPSHOT\tsnapshot\t2" in output
        and METADATA_FILE_NAME in file_names(storage, version.version_id)
    )
