"""Shared fixtures for party tests."""

from datetime import UTC, datetime, timedelta

import pytest

from party.metadata import TrackMetadata
from party.service import PartyService
from party.store import InMemoryPartyRepository

START = datetime(2025, 6, 1, 20, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 1.0) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


class FakeMetadata:
    """Metadata client returning canned results and recording lookups."""

    def __init__(self, result: TrackMetadata | None = None) -> None:
        self.result = result
        self.calls: list[str] = []

    async def fetch(self, video_id: str) -> TrackMetadata | None:
        self.calls.append(video_id)
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metadata():
    return FakeMetadata(TrackMetadata(title="Song", channel="Band", thumbnail="https://img.example/1.jpg"))


@pytest.fixture
def repository():
    return InMemoryPartyRepository()


@pytest.fixture
def service(repository, metadata, clock):
    return PartyService(repository, metadata, clock=clock)
