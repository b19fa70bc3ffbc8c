# vermietertools/services/store_base.py
"""
Data-store contracts consumed by the authentication core.

Implementations raise StorageError for every backend failure and never
return partial results. Deletes are idempotent: removing a token that does
not exist is not an error.
"""
from abc import ABC, abstractmethod
from typing import Optional

from vermietertools.models.identity import SessionRecord, UserRecord


class CredentialStore(ABC):
    """Persisted user records (email, display name, password hash)."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact, case-sensitive match on the stored email."""

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        """
        Raises:
            ConflictError: If a user with this email already exists
        """


class SessionStore(ABC):
    """Persisted opaque session tokens."""

    @abstractmethod
    async def insert_session(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    async def get_session(self, token: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    async def delete_sessions(self, token: str) -> int:
        """Delete every session stored under this token, return how many."""
