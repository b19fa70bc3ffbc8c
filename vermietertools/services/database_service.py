# vermietertools/services/database_service.py
"""
Database Service for Vermietertools.

Async SQLAlchemy wrapper implementing the Credential Store and the Session
Store on one relational database:
- PostgreSQL (psycopg 3) in production, SQLite (aiosqlite) for development/tests
- Explicit lifecycle: engine created in initialize(), disposed in shutdown()
- Every driver error surfaces as StorageError
"""
from contextlib import asynccontextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional
import asyncio
import logging

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from vermietertools.core.exceptions import ConflictError, StorageError, config_error, storage_error
from vermietertools.core.service_base import BaseService, ServiceConfig
from vermietertools.models.db_models import Base, Session, User
from vermietertools.models.identity import SessionRecord, UserRecord
from vermietertools.services.store_base import CredentialStore, SessionStore

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Pick the async driver for plain postgresql:// and sqlite:// URLs."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    if scheme in ("postgres", "postgresql"):
        return f"postgresql+psycopg://{rest}"
    if scheme == "sqlite":
        return f"sqlite+aiosqlite://{rest}"
    return url


def _is_sqlite_memory(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


@dataclass
class DatabaseConfig(ServiceConfig):
    """Configuration for the Database Service"""
    url: Optional[str] = None
    echo: bool = False
    create_schema: bool = True
    pool_pre_ping: bool = True


class DatabaseService(BaseService[DatabaseConfig], CredentialStore, SessionStore):
    """
    Relational Credential/Session store.

    One AsyncSession per operation; each write commits on its own so the
    store only relies on per-row atomicity of the database.
    """

    def __init__(self, config: DatabaseConfig):
        super().__init__(config, logger)
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        # Set when all sessions share one connection (in-memory SQLite)
        self._shared_connection_lock: Optional[asyncio.Lock] = None

    def _validate_config(self) -> None:
        super()._validate_config()

        if not self.config.url:
            raise config_error("DATABASE_URL is not configured", self.service_name)

    async def _initialize_client(self) -> AsyncEngine:
        url = normalize_database_url(self.config.url)

        engine_kwargs: Dict[str, Any] = {"echo": self.config.echo}
        if _is_sqlite_memory(url):
            # In-memory SQLite exists per connection; share a single one
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            # One transaction at a time, or a rollback on close discards
            # another operation's uncommitted writes
            self._shared_connection_lock = asyncio.Lock()
        elif not url.startswith("sqlite"):
            engine_kwargs["pool_pre_ping"] = self.config.pool_pre_ping

        engine = create_async_engine(url, **engine_kwargs)
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

        if self.config.create_schema:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self.logger.info("Database schema ensured")

        return engine

    @asynccontextmanager
    async def _db(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Open a session for one store operation.

        Usage:
            async with self._db("get_session") as db:
                ...
        """
        await self.ensure_initialized()

        try:
            async with self._shared_connection_lock or nullcontext():
                async with self._session_factory() as db:
                    yield db
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Database operation '{operation}' failed: {type(e).__name__}", exc_info=True)
            raise storage_error("Datenbankfehler", self.service_name, operation) from e

    # --- Credential Store ---

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._db("get_user_by_email") as db:
            user = await db.scalar(select(User).where(User.email == email))
            return user.to_record() if user else None

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        async with self._db("get_user_by_id") as db:
            user = await db.get(User, user_id)
            return user.to_record() if user else None

    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        try:
            async with self._db("create_user") as db:
                user = User(email=email, name=name, password_hash=password_hash)
                db.add(user)
                await db.commit()
                return user.to_record()
        except IntegrityError as e:
            raise ConflictError("E-Mail ist bereits registriert", field="email") from e

    # --- Session Store ---

    async def insert_session(self, record: SessionRecord) -> None:
        try:
            async with self._db("insert_session") as db:
                db.add(Session.from_record(record))
                await db.commit()
        except IntegrityError as e:
            # Unknown user_id or token collision
            raise storage_error("Sitzung konnte nicht gespeichert werden", self.service_name, "insert_session") from e

    async def get_session(self, token: str) -> Optional[SessionRecord]:
        async with self._db("get_session") as db:
            row = await db.scalar(select(Session).where(Session.token == token))
            return row.to_record() if row else None

    async def delete_sessions(self, token: str) -> int:
        async with self._db("delete_sessions") as db:
            result = await db.execute(delete(Session).where(Session.token == token))
            await db.commit()
            return result.rowcount or 0

    # --- Lifecycle ---

    async def health_check(self) -> Dict[str, Any]:
        """Check database connectivity"""
        try:
            async with self._db("health_check") as db:
                await db.execute(text("SELECT 1"))
            return {
                "healthy": True,
                "status": "connected",
                "details": {"dialect": self.client.dialect.name}
            }
        except StorageError as e:
            return {
                "healthy": False,
                "status": "error",
                "details": {"error": e.message}
            }

    async def _cleanup(self) -> None:
        """Dispose the connection pool"""
        await self._client.dispose()
        self._session_factory = None
        self._shared_connection_lock = None
