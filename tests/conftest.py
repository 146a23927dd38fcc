"""
Test infrastructure for the Blog API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- Each test builds its own ``Database`` and passes it to ``create_app``,
  the same injection path production uses, so no dependency overrides
  are needed.
- Tables are created fresh before each test and dropped after.
- bcrypt runs with the minimum work factor (4) to keep the suite fast.
"""
from typing import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from blog_api.auth.tokens import TokenService
from blog_api.config import Settings
from blog_api.database import Database
from blog_api.main import create_app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": TEST_DATABASE_URL,
        "JWT_SECRET": TEST_SECRET,
        "JWT_EXPIRATION": "1h",
        "BCRYPT_ROUNDS": 4,
        "AUTO_CREATE_TABLES": False,
        "LOG_LEVEL": "WARNING",
        "LOG_DIR": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build test settings with selected fields overridden."""
    return make_settings


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService.from_settings(test_settings)


@pytest_asyncio.fixture
async def database():
    """A fresh in-memory database with all tables, dropped after the test."""
    db = Database(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call services directly.
    """
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(database: Database, test_settings: Settings) -> AsyncClient:
    """Yield an httpx.AsyncClient wired to a freshly built app via ASGITransport."""
    app = create_app(test_settings, db=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_and_login(async_client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """
    Return a helper that registers a user over HTTP, logs in, and hands
    back ``{"id", "username", "token", "headers"}``.
    """

    async def _register_and_login(username: str, password: str = "secret1") -> dict:
        resp = await async_client.post("/api/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        })
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["user"]["id"]

        resp = await async_client.post("/api/login", json={
            "username": username,
            "password": password,
        })
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        return {
            "id": user_id,
            "username": username,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _register_and_login
