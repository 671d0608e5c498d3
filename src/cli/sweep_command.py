"""Retention sweep and metadata prune command wiring for Snapkeep CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.types import PruneReport, SweepReport
from housekeeping.maintenance import MaintenanceClient


def add_sweep_command(subparsers: Any) -> None:
    """Register sweep subcommand."""
    parser = subparsers.add_parser(
        "sweep",
        help="Delete snapshot builds beyond the retain count",
    )
    parser.add_argument(
        "--retain-builds",
        type=int,
        help="Override SNAPKEEP_RETAIN_SNAPSHOT_BUILDS for this run (-1 disables)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="List files that would be removed without deleting them",
    )


def add_prune_command(subparsers: Any) -> None:
    """Register prune subcommand."""
    parser = subparsers.add_parser(
        "prune",
        help="Reconcile every snapshot metadata document with stored files",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report documents that would change without rewriting them",
    )


def run_sweep_command(client: MaintenanceClient, args: argparse.Namespace) -> int:
    """Execute the retention sweep and print its report."""
    report = client.run_retention_sweep(retain_builds=args.retain_builds, dry_run=args.dry_run)
    print(render_sweep_report(report))
    return 0 if report.error is None else 1


def run_prune_command(client: MaintenanceClient, args: argparse.Namespace) -> int:
    """Execute the global prune and print its report."""
    report = client.run_global_prune(dry_run=args.dry_run)
    print(render_prune_report(report))
    return 0 if report.error is None else 1


def render_sweep_report(report: SweepReport) -> str:
    """Render sweep report into stable multi-line text."""
    lines = [
        f"retain_builds={report.retain_builds}",
        f"dry_run={str(report.dry_run).lower()}",
    ]
    for version_id, names in report.pruned_files:
        for name in names:
            lines.append(f"[PRUNED] version={version_id} {name}")
    for failure in report.failures:
        lines.append(f"[FAILED] version={failure.version_id} {failure.version} :: {failure.error}")
    lines.append(f"pruned={report.pruned_count}")
    lines.append(f"failed={len(report.failures)}")
    if report.cancelled:
        lines.append("cancelled=true")
    return "\n".join(lines)


def render_prune_report(report: PruneReport) -> str:
    """Render prune report into stable multi-line text."""
    lines = [f"dry_run={str(report.dry_run).lower()}"]
    for version_id in report.changed_versions:
        lines.append(f"[CHANGED] version={version_id}")
    for failure in report.failures:
        lines.append(f"[FAILED] version={failure.version_id} {failure.version} :: {failure.error}")
    lines.append(f"checked={report.checked_count}")
    lines.append(f"changed={len(report.changed_versions)}")
    lines.append(f"failed={len(report.failures)}")
    if report.cancelled:
        lines.append("cancelled=true")
    return "\n".join(lines)
