from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from todo_app import db
from todo_app.client.api import TaskApiClient
from todo_app.config import get_settings
from todo_app.main import app


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}"


def _use_database(monkeypatch: pytest.MonkeyPatch, url: str) -> None:
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("DB_CONNECT_RETRIES", "1")
    monkeypatch.setenv("DB_RETRY_DELAY", "0")
    get_settings.cache_clear()


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch, database_url: str):
    """TestClient with the lifespan run against a fresh SQLite file"""
    _use_database(monkeypatch, database_url)
    with TestClient(app) as c:
        yield c
    get_settings.cache_clear()


@pytest.fixture()
def broken_client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """TestClient whose store cannot be opened"""
    _use_database(monkeypatch, f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'tasks.db'}")
    with TestClient(app) as c:
        yield c
    get_settings.cache_clear()


@pytest.fixture()
async def api(database_url: str):
    """Real TaskApiClient talking to the app in-process"""
    await db.init_db(database_url, max_retries=1)
    transport = httpx.ASGITransport(app=app)
    async with TaskApiClient("http://testserver/api", transport=transport) as client:
        yield client
    await db.close_db()

