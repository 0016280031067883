"""
Pytest configuration and fixtures for mountguard tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from mountguard.config import ConfigStore
from mountguard.host import MessageSink
from mountguard.policy import NotificationThrottle, PolicyEngine
from mountguard.schema import PolicyConfig


class RecordingSink(MessageSink):
    """MessageSink that keeps every delivery for assertions."""

    def __init__(self) -> None:
        self.delivered: list[tuple[str, str, tuple[str, ...]]] = []

    def deliver(self, actor_id: str, template_key: str, args: tuple[str, ...]) -> None:
        self.delivered.append((actor_id, template_key, args))


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def helmet_config() -> PolicyConfig:
    """Minicopter monitored, helmet blocked, ANY mode."""
    return PolicyConfig(
        monitored_vehicle_types=["minicopter.entity"],
        blocked_items=["heavy.plate.helmet"],
        require_all_items=False,
    )


@pytest.fixture
def make_engine():
    """Factory for an engine over a given config."""

    def _make(config: PolicyConfig, cooldown: float = 2.0) -> PolicyEngine:
        return PolicyEngine(ConfigStore(config=config), NotificationThrottle(cooldown))

    return _make


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a simple config YAML for testing."""
    return """
version: "1.0.3"
monitoredVehicleTypes:
  - minicopter.entity
  - rowboat
blockedItems:
  - heavy.plate.helmet
  - heavy.plate.jacket
requireAllItems: false
"""
