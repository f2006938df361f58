"""Shared fixtures for orchestration tests."""

import pytest

from core.settings import EngineSettings
from orchestration.events import Event


class FakeEventBus:
    """Fake EventBus for testing."""

    def __init__(self) -> None:
        """Initialize fake event bus."""
        self.events: list[Event] = []

    async def publish(self, event: Event) -> None:
        """Store event."""
        self.events.append(event)

    def subscribe(self, event_name: str, handler: object) -> None:
        """Subscribe handler (no-op for fake)."""
        pass

    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.fixture
def fake_event_bus() -> FakeEventBus:
    return FakeEventBus()


@pytest.fixture
def engine_settings() -> EngineSettings:
    return EngineSettings(retry_backoff_seconds=0.0, max_concurrency=1, allow_overwrite=False)
