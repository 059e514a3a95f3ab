"""Test configuration."""

import os
from datetime import datetime, timezone

import pytest
from pytest import Config

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.models import BottlePayload, CommentPayload
from bottle_sync.content_store.service import ContentService
from bottle_sync.content_store.store import InMemoryContentStore
from bottle_sync.core.logging import configure_logging
from bottle_sync.engagement.tracker import CounterTracker
from bottle_sync.ledger.memory import InMemoryLedger

fixture = pytest.fixture

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    os.environ["TESTING"] = "true"
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = 0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@fixture
def clock() -> FakeClock:
    return FakeClock()


@fixture
def bottle() -> BottlePayload:
    return BottlePayload(
        text="Hello from the sea",
        author_id="user-123",
        created_at_unix=int(FIXED_NOW.timestamp()),
        created_at_iso=FIXED_NOW.isoformat(),
        like_count=99,
        comment_count=4,
    )


@fixture
def comment() -> CommentPayload:
    return CommentPayload(
        text="Nice bottle",
        author_id="user-456",
        created_at_unix=int(FIXED_NOW.timestamp()),
        created_at_iso=FIXED_NOW.isoformat(),
        parent_entity_id=1,
    )


@fixture
def memory_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@fixture
def content_service(memory_store: InMemoryContentStore, clock: FakeClock) -> ContentService:
    return ContentService(
        memory_store, ContentCache(clock=clock), clock=lambda: FIXED_NOW
    )


@fixture
def tracker() -> CounterTracker:
    return CounterTracker()


@fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()
