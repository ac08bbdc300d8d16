"""
Shared pytest fixtures and configuration.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import waitful.settings as settings_mod
from waitful.api.app import create_app
from waitful.config import config
from waitful.storage import LocalStore


class FakeClock:
    """Manually advanced stand-in for time.time()."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def tmp_settings_file(tmp_path: Path, monkeypatch):
    """
    Redirect the settings store to a fresh temp file for each test.
    Also resets the in-memory cache so each test starts clean.
    """
    fake_file = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_FILE", fake_file)
    monkeypatch.setattr(settings_mod, "_current", {})
    yield fake_file
    monkeypatch.setattr(settings_mod, "_current", {})


@pytest.fixture()
def store(tmp_path: Path) -> LocalStore:
    return LocalStore(tmp_path / "local_store.db")


@pytest.fixture()
def app(tmp_path: Path, monkeypatch):
    """Create a fresh app instance whose local store lives in tmp_path."""
    monkeypatch.setattr(config, "data_dir", tmp_path)
    return create_app()


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
