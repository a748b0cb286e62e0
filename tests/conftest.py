"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path so 'e2estate.*' imports work without an install.
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture(autouse=True)
def _isolate_global_buses():
    """Keep event/log subscribers and verbosity from leaking between tests."""
    from e2estate.core.diagnostics import uninstall_jsonl_sink
    from e2estate.core.events import get_event_bus
    from e2estate.core.log_bus import get_log_bus
    from e2estate.core.logging import VerbosityLevel, set_verbosity

    set_verbosity(VerbosityLevel.NORMAL)
    yield
    uninstall_jsonl_sink()
    get_event_bus().clear()
    get_log_bus().clear()
    set_verbosity(VerbosityLevel.NORMAL)


@pytest.fixture
def state_path(tmp_path):
    """Location of the state document (not created).

    Args:
        tmp_path: pytest temporary directory

    Returns:
        Path to preferred-ids.json inside a per-test directory
    """
    return tmp_path / "state" / "preferred-ids.json"


@pytest.fixture
def fast_settings():
    """StoreSettings with a short lock timeout so contention tests stay quick."""
    from e2estate.store import StoreSettings

    return StoreSettings(lock_timeout_ms=150, retry_delay_ms=10, stale_seconds=120)


@pytest.fixture
def config_resolver(tmp_path):
    """ConfigResolver isolated from the real user and system config files."""
    from e2estate.core.config import ConfigResolver

    return ConfigResolver(
        cli_args={},
        user_config_path=tmp_path / "no_user_config.yaml",
        system_config_path=tmp_path / "no_system_config.yaml",
    )
