"""Runtime configuration model for Snapkeep.

This module owns all environment variable parsing and validation.
Maintenance operations receive explicit values from this object and
never read process-wide settings themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_LOG_LEVEL,
    RETENTION_DISABLED,
    RETENTION_DISABLED_ALIASES,
)
from core.errors import SnapkeepConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class SnapkeepConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for the package index and blobs.
        retain_snapshot_builds: Builds to keep per snapshot version, or
            ``RETENTION_DISABLED`` to turn the sweep off.
        debug_snapshot_cleanup: Run the retention sweep as a dry run.
        debug_metadata_prune: Run metadata pruning and the deletion hook as a dry run.
        log_level: Standard logging level name.
    """

    data_root: Path
    retain_snapshot_builds: int
    debug_snapshot_cleanup: bool
    debug_metadata_prune: bool
    log_level: str

    @classmethod
    def from_env(cls) -> "SnapkeepConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SnapkeepConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("SNAPKEEP_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            retain_snapshot_builds=_parse_retain_builds(
                os.getenv("SNAPKEEP_RETAIN_SNAPSHOT_BUILDS", str(RETENTION_DISABLED))
            ),
            debug_snapshot_cleanup=_parse_flag(
                "SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP",
                os.getenv("SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP", "false"),
            ),
            debug_metadata_prune=_parse_flag(
                "SNAPKEEP_DEBUG_METADATA_PRUNE",
                os.getenv("SNAPKEEP_DEBUG_METADATA_PRUNE", "false"),
            ),
            log_level=_parse_log_level(os.getenv("SNAPKEEP_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )


def _parse_retain_builds(raw_value: str) -> int:
    """Parse the retain-count value.

    Sub-minimum integers are passed through unchanged; the sweep
    rejects them when it runs.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed retain count, or ``RETENTION_DISABLED``.

    Raises:
        SnapkeepConfigError: If value is neither an integer nor a disabled alias.
    """
    normalized = raw_value.strip().lower()
    if normalized in RETENTION_DISABLED_ALIASES:
        return RETENTION_DISABLED
    try:
        return int(normalized)
    except ValueError as error:
        raise SnapkeepConfigError(
            "Invalid SNAPKEEP_RETAIN_SNAPSHOT_BUILDS value: "
            f"expected integer or 'off', got '{raw_value}'. "
            "Set it to a positive build count or 'off'."
        ) from error


def _parse_flag(name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        name: Environment variable name, used in error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        SnapkeepConfigError: If value is not a recognized boolean.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SnapkeepConfigError(
        f"Invalid {name} value: expected true/false, got '{raw_value}'."
    )


def _parse_log_level(raw_value: str) -> str:
    level_name = raw_value.strip().upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise SnapkeepConfigError(
            f"Invalid SNAPKEEP_LOG_LEVEL value: '{raw_value}'. "
            "Use DEBUG, INFO, WARNING, or ERROR."
        )
    return level_name
