# vermietertools/services/factory.py
"""
Store factory - builds the backends selected in the settings.

Users always live in the relational database. Sessions live there too
unless SESSION_BACKEND=redis.
"""

import logging
from typing import List, NamedTuple

from vermietertools.core.config import Settings
from vermietertools.core.exceptions import config_error
from vermietertools.core.service_base import BaseService
from vermietertools.services.database_service import DatabaseConfig, DatabaseService
from vermietertools.services.redis_service import RedisConfig, RedisService
from vermietertools.services.store_base import CredentialStore, SessionStore

logger = logging.getLogger(__name__)


class Stores(NamedTuple):
    credentials: CredentialStore
    sessions: SessionStore
    services: List[BaseService]


def build_stores(settings: Settings) -> Stores:
    """
    Create (but do not connect) the configured stores.

    Returns:
        Stores with the services whose lifecycle the caller must manage
    """
    database = DatabaseService(DatabaseConfig(
        url=settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        create_schema=settings.DATABASE_CREATE_SCHEMA,
    ))

    if settings.SESSION_BACKEND == "database":
        logger.info("Session store: database")
        return Stores(credentials=database, sessions=database, services=[database])

    if settings.SESSION_BACKEND == "redis":
        logger.info("Session store: redis")
        redis_store = RedisService(RedisConfig(url=settings.REDIS_URL))
        return Stores(credentials=database, sessions=redis_store, services=[database, redis_store])

    raise config_error(f"Unknown SESSION_BACKEND '{settings.SESSION_BACKEND}'", "SessionStore")
