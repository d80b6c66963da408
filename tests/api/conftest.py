"""API test fixtures: async DB, FastAPI test client and an unlocked vault.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched for code that opens its own sessions (streamed chat)
    - Rate limiter storage reset per test: all requests share one client IP

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - fake_chat patches create_chat_client at the ai_assistant boundary
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from subvault.db.base import Base
from subvault.infrastructure.database import get_db, DatabaseSessionManager
from subvault.infrastructure.rate_limit import limiter
import subvault.infrastructure.database as db_module
import subvault.models  # noqa: F401
from subvault.main import app

from tests.api.fake_chat_client import FakeChatClient
from tests.api.vault_helpers import auth_headers, unlock


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def vault(client):
    """An unlocked vault: {"token", "vaultId", "headers"}."""
    body = await unlock(client, "correct horse battery staple")
    return {
        "token": body["token"],
        "vaultId": body["vaultId"],
        "headers": auth_headers(body["token"]),
    }


@pytest.fixture
async def other_vault(client):
    body = await unlock(client, "a different master key")
    return {
        "vaultId": body["vaultId"],
        "headers": auth_headers(body["token"]),
    }


@pytest.fixture
def fake_chat(monkeypatch):
    """Replace the provider client with a scripted FakeChatClient."""
    fake = FakeChatClient()

    def _create(base_url, api_key):
        fake.created_with.append({"base_url": base_url, "api_key": api_key})
        return fake

    monkeypatch.setattr(
        "subvault.services.ai_assistant.create_chat_client", _create,
    )
    return fake


@pytest.fixture
async def ai_ready(client, vault):
    """A vault with a complete AI provider configuration."""
    res = await client.post(
        "/api/v1/ai/config",
        json={
            "baseUrl": "https://api.example.com",
            "apiKey": "sk-live-1234567890",
            "model": "gpt-test",
        },
        headers=vault["headers"],
    )
    assert res.status_code == 200, res.text
    return vault
