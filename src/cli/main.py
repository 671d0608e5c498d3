"""Snapkeep CLI entry points.

This module exposes maintenance commands for Maven snapshot versions.
It maps argparse commands onto maintenance client calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.sweep_command import (
    add_prune_command,
    add_sweep_command,
    run_prune_command,
    run_sweep_command,
)
from core.config import SnapkeepConfig
from core.constants import MAVEN_PACKAGE_TYPE
from core.errors import SnapkeepConfigError, SnapkeepError
from core.logging_config import configure_logging
from housekeeping.maintenance import MaintenanceClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="snapkeep", description="Maven snapshot housekeeping")
    parser.add_argument("--data-root", help="Override SNAPKEEP_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_sweep_command(subparsers)
    add_prune_command(subparsers)
    _add_reconcile_command(subparsers)
    _add_delete_file_command(subparsers)
    _add_versions_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Snapkeep CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 success, 1 failures reported, 2 configuration error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root)
        return _dispatch(client, args)
    except SnapkeepConfigError as error:
        print(f"config_error={error}")
        return 2
    except SnapkeepError as error:
        print(f"error={error}")
        return 1


def _dispatch(client: MaintenanceClient, args: argparse.Namespace) -> int:
    if args.command == "sweep":
        return run_sweep_command(client, args)
    if args.command == "prune":
        return run_prune_command(client, args)
    if args.command == "reconcile":
        return _run_reconcile_command(client, args)
    if args.command == "delete-file":
        return _run_delete_file_command(client, args)
    return _run_versions_command(client)


def _build_client(data_root: str | None) -> MaintenanceClient:
    """Build maintenance client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured maintenance client.
    """
    config = SnapkeepConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    configure_logging(config.log_level)
    return MaintenanceClient(config)


def _add_reconcile_command(subparsers: Any) -> None:
    """Register reconcile subcommand."""
    parser = subparsers.add_parser("reconcile", help="Reconcile one snapshot version")
    parser.add_argument("version_id", type=int, help="Package version id")
    parser.add_argument("--dry-run", action="store_true", help="Do not rewrite metadata")


def _add_delete_file_command(subparsers: Any) -> None:
    """Register delete-file subcommand."""
    parser = subparsers.add_parser(
        "delete-file",
        help="Delete one package file and reconcile its snapshot metadata",
    )
    parser.add_argument("version_id", type=int, help="Package version id")
    parser.add_argument("name", help="File name")


def _add_versions_command(subparsers: Any) -> None:
    """Register versions subcommand."""
    subparsers.add_parser("versions", help="List Maven package versions")


def _run_reconcile_command(client: MaintenanceClient, args: argparse.Namespace) -> int:
    result = client.reconcile(args.version_id, dry_run=args.dry_run)
    print(f"changed={str(result.changed).lower()}")
    print(f"written={str(result.written).lower()}")
    print(f"build_number={result.build_number}")
    for entry in result.removed_entries:
        print(f"[REMOVED] {entry.value} {entry.classifier or '-'} {entry.extension}")
    return 0


def _run_delete_file_command(client: MaintenanceClient, args: argparse.Namespace) -> int:
    hook_result = client.delete_file(args.version_id, args.name)
    print(f"deleted={hook_result.file_name}")
    if hook_result.skipped_reason:
        print(f"metadata_skipped={hook_result.skipped_reason}")
    if hook_result.reconcile is not None:
        print(f"metadata_changed={str(hook_result.reconcile.changed).lower()}")
    if hook_result.error is not None:
        print(f"metadata_error={hook_result.error}")
    return 0


def _run_versions_command(client: MaintenanceClient) -> int:
    for version in client.storage.list_versions(MAVEN_PACKAGE_TYPE):
        file_count = len(client.storage.list_files(version.version_id))
        snapshot_flag = "snapshot" if version.is_snapshot else "release"
        print(f"{version.version_id}\t{version.version}\t{snapshot_flag}\t{file_count}")
    return 0
