"""
Global pytest fixtures for the shortlink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage for direct testing
    - Provide a LinkManager wired to the Storage fixture

Using `create_app()` with explicit Settings and an injected Storage gives
each test fresh state and keeps the environment out of the picture.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.config import Settings
from shortlink.manager.link_manager import LinkManager
from shortlink.storage.storage import Storage

BASE_URL = "http://localhost:5000"
PUBLIC_DIR = Path(__file__).resolve().parents[1] / "public"


class TickingClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL, public_dir=str(PUBLIC_DIR))


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory store."""
    return Storage()


@pytest.fixture
def ticking_storage() -> Storage:
    """In-memory store whose created_at values strictly increase."""
    return Storage(clock=TickingClock())


@pytest.fixture
def manager(storage: Storage) -> LinkManager:
    return LinkManager(storage=storage)


@pytest.fixture
def client(settings: Settings, storage: Storage) -> TestClient:
    """
    Fresh TestClient over a new app sharing the `storage` fixture, so tests
    can assert on stored state directly.
    """
    return TestClient(create_app(settings=settings, storage=storage))
