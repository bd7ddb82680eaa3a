"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path (for 'devwizard.*' imports without an install).
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture(autouse=True)
def _reset_logging():
    """Verbosity and log bus subscribers are process-global; isolate tests."""
    from devwizard.core.log_bus import get_log_bus
    from devwizard.core.logging import VerbosityLevel, set_verbosity

    set_verbosity(VerbosityLevel.NORMAL)
    get_log_bus().clear()
    yield
    set_verbosity(VerbosityLevel.NORMAL)
    get_log_bus().clear()


@pytest.fixture
def answers_dir(tmp_path: Path) -> Path:
    """Answers root inside a throwaway repository."""
    return tmp_path / "repo" / ".dev-wizard" / "answers"


@pytest.fixture
def two_segments():
    """category(maintenance) / cadence(daily, weekly), no custom values."""
    from devwizard.answers.types import IdentityOption, IdentitySegmentSpec

    return [
        IdentitySegmentSpec(
            id="category",
            prompt="Select category",
            options=(IdentityOption(value="maintenance", label="Maintenance"),),
        ),
        IdentitySegmentSpec(
            id="cadence",
            prompt="Select cadence",
            options=(
                IdentityOption(value="daily", label="Daily"),
                IdentityOption(value="weekly", label="Weekly"),
            ),
        ),
    ]


@pytest.fixture
def four_segments():
    """category / task / cadence with one option each, then a free-text window."""
    from devwizard.answers.types import IdentityOption, IdentitySegmentSpec

    return [
        IdentitySegmentSpec(
            id="category",
            prompt="Select category",
            options=(IdentityOption(value="projects", label="Projects"),),
        ),
        IdentitySegmentSpec(
            id="task",
            prompt="Select task",
            options=(IdentityOption(value="maintenance", label="Maintenance workflows"),),
        ),
        IdentitySegmentSpec(
            id="cadence",
            prompt="Select cadence",
            options=(IdentityOption(value="daily", label="Daily"),),
        ),
        IdentitySegmentSpec(id="window", prompt="Name this window", allow_custom=True),
    ]
