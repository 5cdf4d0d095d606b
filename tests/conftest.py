"""Shared pytest configuration and fixtures for the PortfoliOS test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portfolios.core.config_manager import ConfigManager  # noqa: E402
from portfolios.core.frame_scheduler import FrameScheduler  # noqa: E402
from portfolios.core.preferences import Preferences  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "network: mark test as requiring outbound network access"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that reach real remote endpoints",
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless --run-network is specified."""
    if config.getoption("--run-network"):
        return

    skip_network = pytest.mark.skip(reason="Need --run-network option to run")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Shared Fixtures
# =============================================================================

class ManualClock:
    """Deterministic clock; tests advance it explicitly."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock) -> FrameScheduler:
    return FrameScheduler(clock=clock)


@pytest.fixture
def config_manager(tmp_path) -> ConfigManager:
    """ConfigManager whose override files land inside the test's tmp dir."""
    return ConfigManager(overrides_dir=tmp_path / "overrides")


@pytest.fixture
def preferences(tmp_path, config_manager) -> Preferences:
    return Preferences(tmp_path / "prefs.txt", config_manager=config_manager)
