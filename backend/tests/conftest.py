"""
Shared fixtures.

Each test gets its own SQLite file and upload directory under tmp_path.
Redis is replaced by an AsyncMock backed by a plain dict, so session
writes made by one request are visible to the next.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from ats.config import Settings
from ats.database import Database
from ats.main import create_app
from ats.services.auth import provision_user
from ats.services.file_store import FileStore
from ats.services.session_cache import SessionCache

TEST_USERNAME = "recruiter"
TEST_EMAIL = "recruiter@example.com"
TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'ats.db'}",
        redis_url="redis://localhost:6379/15",
        secret_key="test-secret-key",
        upload_dir=tmp_path / "uploads",
        cleanup_interval_hours=0,
    )


@pytest.fixture
def mock_redis():
    """Dict-backed async Redis stand-in."""
    store = {}

    async def _set(key, value, ex=None):
        store[key] = value
        return True

    async def _get(key):
        return store.get(key)

    async def _delete(*keys):
        return sum(1 for key in keys if store.pop(key, None) is not None)

    redis = AsyncMock()
    redis.set = AsyncMock(side_effect=_set)
    redis.get = AsyncMock(side_effect=_get)
    redis.delete = AsyncMock(side_effect=_delete)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    redis.store = store
    return redis


@pytest.fixture
def session_cache(mock_redis):
    cache = SessionCache(redis_url="redis://localhost:6379/15")
    cache.redis = mock_redis
    return cache


@pytest.fixture
def file_store(tmp_path):
    return FileStore(tmp_path / "uploads")


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


def seed_user(settings: Settings, username=TEST_USERNAME, email=TEST_EMAIL, password=TEST_PASSWORD):
    """Provision a user synchronously (for fixtures of sync tests)."""

    async def _create():
        db = Database(settings.database_url)
        await db.create_all()
        try:
            async with db.session() as session:
                return await provision_user(session, username, email, password)
        finally:
            await db.dispose()

    return asyncio.run(_create())


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app, settings, mock_redis):
    seed_user(settings)
    with TestClient(app) as test_client:
        app.state.session_cache.redis = mock_redis
        yield test_client


@pytest.fixture
def token(client):
    response = client.post(
        "/api/auth/signin",
        json={"username": TEST_USERNAME, "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
