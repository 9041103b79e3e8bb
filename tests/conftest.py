# =============================================================================
# USERHUB BACKEND - TEST CONFIGURATION
# =============================================================================
# File: tests/conftest.py
# Description: Pytest fixtures for testing with in-memory SQLite and fakeredis
# =============================================================================

from typing import AsyncGenerator, Dict

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth.gate import AuthGate
from core.bootstrap import bootstrap
from core.config import Settings
from core.security import PasswordManager, TokenIssuer
from db.adapters.redis_adapter import RedisAdapter
from db.adapters.sqlite_adapter import SQLiteAdapter
from main import create_application
from session.manager import SessionManager
from session.storage import SessionStore

from tests.helpers import InMemoryUserDirectory, login, promote_to_admin, register


# =============================================================================
# SETTINGS
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated instance: memory database, cheap hashing."""
    return Settings(
        _env_file=None,
        app_env="development",
        sqlite_path=":memory:",
        upload_dir=str(tmp_path / "uploads"),
        log_dir=str(tmp_path / "logs"),
        log_level="WARNING",
        argon2_memory_cost=1024,
        argon2_time_cost=1,
        argon2_parallelism=1,
        bcrypt_rounds=4,
        redis_operation_timeout=1.0,
    )


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest_asyncio.fixture
async def db_adapter() -> AsyncGenerator[SQLiteAdapter, None]:
    """
    Create in-memory SQLite adapter for testing.

    Yields fresh database for each test.
    """
    adapter = SQLiteAdapter.create_for_testing()
    await adapter.connect()
    await adapter.create_tables()

    yield adapter

    await adapter.disconnect()


# =============================================================================
# REDIS FIXTURES
# =============================================================================

@pytest.fixture
def fake_server() -> fakeredis.FakeServer:
    """
    Private fakeredis server.

    Set ``fake_server.connected = False`` to simulate an outage.
    """
    return fakeredis.FakeServer()


@pytest_asyncio.fixture
async def redis_adapter(settings: Settings, fake_server) -> AsyncGenerator[RedisAdapter, None]:
    client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)
    adapter = RedisAdapter(settings, client=client)
    await adapter.connect()

    yield adapter

    await client.aclose()


@pytest.fixture
def store(redis_adapter: RedisAdapter) -> SessionStore:
    return SessionStore(redis_adapter)


# =============================================================================
# SESSION FIXTURES
# =============================================================================

@pytest.fixture
def passwords(settings: Settings) -> PasswordManager:
    return PasswordManager(settings)


@pytest.fixture
def issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(settings)


@pytest.fixture
def users(passwords: PasswordManager) -> InMemoryUserDirectory:
    return InMemoryUserDirectory(passwords)


@pytest.fixture
def manager(issuer, store, users, passwords) -> SessionManager:
    return SessionManager(issuer=issuer, store=store, users=users, passwords=passwords)


@pytest.fixture
def gate(issuer, store) -> AuthGate:
    return AuthGate(issuer, store)


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def app(settings: Settings, fake_server):
    """Application whose bootstrap injects a fakeredis client."""

    async def test_bootstrap(app_settings: Settings):
        # Created here so the client lives on the TestClient's event loop
        client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)
        return await bootstrap(app_settings, redis_client=client)

    return create_application(settings, bootstrapper=test_bootstrap)


@pytest.fixture
def client(app) -> TestClient:
    """Synchronous test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def alice(client: TestClient) -> Dict[str, str]:
    """Registered and logged-in user ``alice``: id plus both tokens."""
    user_id = register(client, "alice").json()["user"]["id"]
    body = login(client, "alice").json()
    return {
        "id": user_id,
        "access_token": body["access_token"],
        "refresh_token": body["refresh_token"],
    }


@pytest.fixture
def admin(client: TestClient) -> Dict[str, str]:
    """Logged-in administrator ``root``."""
    user_id = register(client, "root").json()["user"]["id"]
    promote_to_admin(client, user_id)
    body = login(client, "root").json()
    return {"id": user_id, "access_token": body["access_token"]}
