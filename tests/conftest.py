"""
Global pytest fixtures for the clicklink test suite.

Responsibilities:
    - Provide a controllable clock so expiry tests never sleep
    - Provide isolated in-memory Storage and a LinkManager wired to it
    - Provide a fresh FastAPI TestClient via the app factory

Why an app factory?
    Using `create_app()` gives each test fresh in-memory state, eliminating
    cross-test flakiness.
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest
from fastapi.testclient import TestClient

from auth.service import UserRegistry
from clicklink.config import Settings
from clicklink.manager.link_manager import LinkManager
from clicklink.storage.storage import Storage
from main import create_app

BASE_URL = "http://clck.ru/"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class RecordingOpener:
    """Opener double that records URLs and can be told to fail."""

    def __init__(self):
        self.opened: List[str] = []
        self.fail_with = None
        self.result = True

    def __call__(self, url: str) -> bool:
        self.opened.append(url)
        if self.fail_with is not None:
            raise self.fail_with
        return self.result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def opener() -> RecordingOpener:
    return RecordingOpener()


@pytest.fixture
def settings() -> Settings:
    return Settings(max_lifetime_hours=24, min_clicks_limit=6, base_url=BASE_URL)


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def users() -> UserRegistry:
    return UserRegistry()


@pytest.fixture
def manager(storage: Storage, clock: FakeClock, opener: RecordingOpener) -> LinkManager:
    """LinkManager with max lifetime 24h and minimum click limit 6."""
    return LinkManager(
        storage,
        max_lifetime_hours=24,
        min_clicks_limit=6,
        base_url=BASE_URL,
        opener=opener,
        clock=clock,
    )


@pytest.fixture
def client(settings: Settings, clock: FakeClock) -> TestClient:
    """Fresh TestClient with a new app instance sharing the test clock."""
    return TestClient(create_app(settings=settings, clock=clock))
