"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import SnapkeepConfig
from core.constants import RETENTION_DISABLED
from core.errors import SnapkeepConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("SNAPKEEP_DATA_ROOT", "./.tmp-snapkeep")

    config = SnapkeepConfig.from_env()

    assert config.data_root.name == ".tmp-snapkeep"


def test_from_env_defaults_to_disabled_retention(monkeypatch: pytest.MonkeyPatch) -> None:
    """Retention should be off and dry-run flags false by default."""
    for name in (
        "SNAPKEEP_RETAIN_SNAPSHOT_BUILDS",
        "SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP",
        "SNAPKEEP_DEBUG_METADATA_PRUNE",
        "SNAPKEEP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = SnapkeepConfig.from_env()

    assert (
        config.retain_snapshot_builds == RETENTION_DISABLED
        and not config.debug_snapshot_cleanup
        and not config.debug_metadata_prune
        and config.log_level == "INFO"
    )


@pytest.mark.parametrize(("raw", "expected"), [("5", 5), ("off", -1), ("Disabled", -1), ("0", 0)])
def test_from_env_parses_retain_builds(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: int
) -> None:
    """Retain count should accept integers and disabled aliases."""
    monkeypatch.setenv("SNAPKEEP_RETAIN_SNAPSHOT_BUILDS", raw)

    assert SnapkeepConfig.from_env().retain_snapshot_builds == expected


def test_from_env_parses_debug_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    """Dry-run flags should accept common boolean spellings."""
    monkeypatch.setenv("SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP", "yes")
    monkeypatch.setenv("SNAPKEEP_DEBUG_METADATA_PRUNE", "1")

    config = SnapkeepConfig.from_env()

    assert config.debug_snapshot_cleanup and config.debug_metadata_prune


@pytest.mark.parametrize(
    ("name", "raw"),
    [
        ("SNAPKEEP_RETAIN_SNAPSHOT_BUILDS", "many"),
        ("SNAPKEEP_DEBUG_SNAPSHOT_CLEANUP", "maybe"),
        ("SNAPKEEP_LOG_LEVEL", "chatty"),
    ],
)
def test_from_env_raises_for_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, raw: str
) -> None:
    """Config should fail for unparseable values."""
    monkeypatch.setenv(name, raw)

    with pytest.raises(SnapkeepConfigError):
        SnapkeepConfig.from_env()
