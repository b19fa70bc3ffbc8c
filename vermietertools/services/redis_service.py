# vermietertools/services/redis_service.py
"""
Redis Service for Vermietertools.

Async-only Session Store on Redis:
- One key per session: session:<token> -> JSON {user_id, expires_at, created_at}
- Keys carry a Redis TTL equal to the remaining session lifetime
- The Session Manager still checks expiry on read, Redis expiry only
  keeps abandoned keys from piling up
"""
import json
import math
import redis.asyncio as redis
from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass
import logging

from vermietertools.core.service_base import BaseService, ServiceConfig
from vermietertools.core.exceptions import StorageError, config_error, storage_error
from vermietertools.models.identity import SessionRecord, utcnow
from vermietertools.services.store_base import SessionStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"


@dataclass
class RedisConfig(ServiceConfig):
    """Configuration for Redis Service"""
    url: Optional[str] = None
    decode_responses: bool = True
    socket_timeout: float = 5.0
    max_connections: int = 10
    retry_on_timeout: bool = True
    health_check_interval: int = 30


class RedisService(BaseService[RedisConfig], SessionStore):
    """
    Redis-backed Session Store.

    Unlike a cache, a session store must not silently drop writes: every
    Redis failure is raised as StorageError.
    """

    def __init__(self, config: RedisConfig):
        """
        Args:
            config: Redis configuration; the URL comes from Settings.REDIS_URL
                (or REDIS_DIRECT_URI) via build_stores()
        """
        super().__init__(config, logger)

    def _validate_config(self) -> None:
        """Validate Redis configuration"""
        super()._validate_config()

        if not self.config.url:
            raise config_error(
                "SESSION_BACKEND=redis requires REDIS_URL",
                self.service_name
            )

    async def _initialize_client(self) -> redis.Redis:
        """Initialize the Redis client and verify the connection"""
        client = redis.from_url(
            self.config.url,
            decode_responses=self.config.decode_responses,
            socket_timeout=self.config.socket_timeout,
            max_connections=self.config.max_connections,
            retry_on_timeout=self.config.retry_on_timeout,
            health_check_interval=self.config.health_check_interval
        )

        await client.ping()
        self.logger.info("Redis connection successful")

        return client

    @staticmethod
    def _key(token: str) -> str:
        return f"{KEY_PREFIX}{token}"

    async def insert_session(self, record: SessionRecord) -> None:
        """
        Store a session with a TTL matching its expiry.

        Raises:
            StorageError: If Redis rejects the write
        """
        await self.ensure_initialized()

        payload = json.dumps({
            "user_id": record.user_id,
            "expires_at": record.expires_at.isoformat(),
            "created_at": record.created_at.isoformat(),
        })
        ttl = max(1, math.ceil((record.expires_at - utcnow()).total_seconds()))

        try:
            await self._client.set(self._key(record.token), payload, ex=ttl)
        except Exception as e:
            self.logger.error(f"Redis set failed for session: {e}")
            raise storage_error("Sitzung konnte nicht gespeichert werden", self.service_name, "insert_session") from e

    async def get_session(self, token: str) -> Optional[SessionRecord]:
        """
        Load a session by token.

        Returns:
            SessionRecord or None if the key does not exist
        """
        await self.ensure_initialized()

        try:
            value = await self._client.get(self._key(token))
        except Exception as e:
            self.logger.warning(f"Redis get failed for session: {e}")
            raise storage_error("Sitzung konnte nicht gelesen werden", self.service_name, "get_session") from e

        if value is None:
            return None

        try:
            data = json.loads(value)
            return SessionRecord(
                token=token,
                user_id=data["user_id"],
                expires_at=datetime.fromisoformat(data["expires_at"]),
                created_at=datetime.fromisoformat(data["created_at"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(
                "Ungültiger Sitzungseintrag",
                service_name=self.service_name,
                operation="get_session",
                details={"error_type": type(e).__name__}
            ) from e

    async def delete_sessions(self, token: str) -> int:
        """
        Delete the session key. Missing keys count as 0, not as an error.
        """
        await self.ensure_initialized()

        try:
            return await self._client.delete(self._key(token))
        except Exception as e:
            self.logger.error(f"Redis delete failed: {e}")
            raise storage_error("Sitzung konnte nicht gelöscht werden", self.service_name, "delete_sessions") from e

    async def health_check(self) -> Dict[str, Any]:
        """
        Check Redis service health.

        Returns:
            Health status including connection info
        """
        try:
            if not self._client:
                return {
                    "healthy": False,
                    "status": "not_connected",
                    "details": {
                        "error": "Client not initialized"
                    }
                }

            await self._client.ping()
            info = await self._client.info()

            return {
                "healthy": True,
                "status": "connected",
                "details": {
                    "redis_version": info.get("redis_version", "unknown"),
                    "connected_clients": info.get("connected_clients", 0),
                }
            }

        except Exception as e:
            return {
                "healthy": False,
                "status": "error",
                "details": {
                    "error": type(e).__name__
                }
            }

    async def _cleanup(self) -> None:
        """Clean up Redis connection"""
        if self._client:
            try:
                await self._client.aclose()
            except Exception as e:
                self.logger.warning(f"Error closing Redis client: {e}")
