# tests/conftest.py
"""
Shared fixtures for the Vermietertools tests.

Every test gets its own in-memory SQLite database and a cheap bcrypt cost
factor. The app is built through create_app() with the stores injected;
httpx's ASGITransport does not run the lifespan, so the fixtures open and
close the services themselves.
"""

import os
import tempfile

import pytest
from httpx import ASGITransport, AsyncClient

# Keep the rotating log file out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="vermietertools-logs-"))

from vermietertools.core.config import Settings
from vermietertools.core.rate_limit_config import limiter
from vermietertools.core.security import PasswordHasher
from vermietertools.main import create_app
from vermietertools.services.database_service import DatabaseConfig, DatabaseService
from vermietertools.services.factory import Stores


ALICE_EMAIL = "alice@example.com"
ALICE_PASSWORD = "secret123"


@pytest.fixture
def settings():
    """Test settings, independent of the developer's .env"""
    return Settings(
        _env_file=None,
        APP_ENV="development",
        DATABASE_URL="sqlite+aiosqlite://",
        SESSION_BACKEND="database",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def hasher():
    """bcrypt with the minimum cost factor"""
    return PasswordHasher(rounds=4)


@pytest.fixture
async def database():
    """Fresh in-memory database per test"""
    service = DatabaseService(DatabaseConfig(url="sqlite+aiosqlite://"))
    await service.initialize()
    yield service
    await service.shutdown()


@pytest.fixture
async def alice(database, hasher):
    """A registered user"""
    return await database.create_user(
        email=ALICE_EMAIL,
        name="Alice",
        password_hash=hasher.hash(ALICE_PASSWORD),
    )


@pytest.fixture
def app(settings, database, hasher):
    app = create_app(
        settings,
        stores=Stores(credentials=database, sessions=database, services=[database]),
        hasher=hasher,
    )
    yield app
    limiter.reset()
    limiter.enabled = False


@pytest.fixture
async def client(app):
    """HTTP client talking to the app in-process"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
