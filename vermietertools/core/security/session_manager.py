# vermietertools/core/security/session_manager.py
"""
Session management for Vermietertools.

Issues, validates and revokes opaque session tokens. Lifecycle of a session:
CREATED -> VALID -> EXPIRED | REVOKED, never back to VALID.

Expiry is enforced lazily: an expired row is deleted the first time it is
read. There is no background sweep, so expired rows linger until touched.
"""

from typing import Callable, Dict, Optional
from datetime import datetime, timedelta
import logging
import secrets

from vermietertools.core.exceptions import StorageError
from vermietertools.models.identity import Identity, SessionRecord, utcnow
from vermietertools.services.store_base import CredentialStore, SessionStore

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(days=7)

# 32 random bytes -> 256 bit, urlsafe base64 (43 chars)
TOKEN_BYTES = 32


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


class SessionManager:
    """
    Creates sessions for authenticated users and resolves the caller's
    identity from a session token.

    Design decisions:
    1. Stores are injected, no global database handle
    2. resolve_identity never raises - storage trouble means "anonymous"
    3. Deletes are idempotent, so concurrent expiry deletes are harmless
    """

    def __init__(
        self,
        sessions: SessionStore,
        credentials: CredentialStore,
        clock: Callable[[], datetime] = utcnow
    ):
        self._sessions = sessions
        self._credentials = credentials
        self._clock = clock

        # Metrics for monitoring
        self._creation_count = 0
        self._expired_purged = 0
        self._resolution_failures = 0

    async def create_session(self, user_id: str) -> str:
        """
        Create a new session for a user.

        Returns:
            The opaque session token

        Raises:
            StorageError: If the session could not be persisted
        """
        now = self._clock()
        record = SessionRecord(
            token=generate_token(),
            user_id=user_id,
            expires_at=now + SESSION_TTL,
            created_at=now,
        )

        try:
            await self._sessions.insert_session(record)
        except StorageError as e:
            raise StorageError(
                "Sitzung konnte nicht erstellt werden",
                service_name=e.service_name,
                operation="create_session",
                details=e.details,
            ) from e

        self._creation_count += 1
        logger.info(f"🔐 Created session for user {user_id}")
        logger.debug(f"Session token {record.token[:8]}... expires {record.expires_at.isoformat()}")
        return record.token

    async def resolve_identity(self, token: Optional[str]) -> Optional[Identity]:
        """
        Resolve a token to the identity of its owner.

        Returns:
            Identity if the session exists and has not expired, else None.
            Storage failures are logged and treated as "not authenticated".
        """
        if not token:
            return None

        try:
            record = await self._sessions.get_session(token)
            if record is None:
                logger.debug(f"Session {token[:8]}... not found")
                return None

            if record.is_expired(self._clock()):
                logger.info(f"⏰ Session {token[:8]}... expired")
                # A concurrent request may have purged it already (0 rows)
                if await self._sessions.delete_sessions(token):
                    self._expired_purged += 1
                return None

            user = await self._credentials.get_user_by_id(record.user_id)
            if user is None:
                logger.warning(f"🚫 Session {token[:8]}... points to missing user {record.user_id}")
                return None

            return user.to_identity()

        except StorageError as e:
            self._resolution_failures += 1
            logger.warning(f"Session lookup failed, treating request as anonymous: {e}")
            return None

    async def destroy_session(self, token: Optional[str]) -> None:
        """
        Revoke every session stored under this token.

        Idempotent: an unknown or already destroyed token is a no-op.

        Raises:
            StorageError: If the store could not be reached
        """
        if not token:
            return

        removed = await self._sessions.delete_sessions(token)
        logger.debug(f"🗑️ Destroyed {removed} session(s) for token {token[:8]}...")

    def get_metrics(self) -> Dict[str, int]:
        """In-process counters since startup."""
        return {
            "sessions_created": self._creation_count,
            "expired_purged": self._expired_purged,
            "resolution_failures": self._resolution_failures,
        }
