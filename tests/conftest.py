"""
WeDart - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import pytest

from dartscore.config.settings import Settings
from dartscore.engine.base import Player
from dartscore.storage.player import InMemoryPlayerDirectory


class FakeClock:
    """Monotonic clock stand-in; advances by `step` on every reading."""

    def __init__(self, start: float = 1000.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        x01_debounce_ms=300,
        x01_default_game_type="501",
        x01_default_legs=3,
        x01_double_out=True,
        x01_double_in=False,
        auto_advance_seconds=0.05,
        state_version=1,
    )


# =============================================================================
# PLAYERS
# =============================================================================

@pytest.fixture
def players() -> list[Player]:
    return [
        Player(id=1, name="Alice"),
        Player(id=2, name="Bob"),
        Player(id=3, name="Cara"),
    ]


@pytest.fixture
def directory(players) -> InMemoryPlayerDirectory:
    return InMemoryPlayerDirectory(players)


# =============================================================================
# CLOCKS AND EVENTS
# =============================================================================

@pytest.fixture
def ticking_clock() -> FakeClock:
    """A clock that moves a full second per reading, so no call is debounced."""
    return FakeClock(step=1.0)


@pytest.fixture
def manual_clock() -> FakeClock:
    """A clock that only moves when advanced."""
    return FakeClock(step=0.0)


@pytest.fixture
def events() -> list:
    """Collects emitted EventPayloads; pass `events.append` as listener."""
    return []
