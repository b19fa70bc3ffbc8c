# vermietertools/core/security/passwords.py
"""
Password hashing with bcrypt.

The digest embeds algorithm, cost factor and salt, so verification needs
nothing but the digest itself. Plaintext passwords are never logged.
"""

import asyncio
from typing import Optional

import bcrypt

from vermietertools.core.exceptions import InvalidInputError

DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes; newer releases raise instead of
# truncating, so truncate explicitly (same digests as bcryptjs).
_MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Salted, deliberately slow one-way hashing."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    def hash(self, plain: str) -> str:
        """
        Hash a plaintext password.

        Raises:
            InvalidInputError: If the password is empty or missing
        """
        if not plain or not isinstance(plain, str):
            raise InvalidInputError("Passwort darf nicht leer sein", field="password")
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, plain: str, digest: str) -> bool:
        """
        Check a plaintext password against a stored digest.

        Mismatch, malformed or foreign-format digests all yield False.
        """
        if not plain or not digest or not isinstance(plain, str) or not isinstance(digest, str):
            return False
        try:
            return bcrypt.checkpw(_encode(plain), digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    # bcrypt blocks for a noticeable time; keep it off the event loop

    async def hash_async(self, plain: str) -> str:
        return await asyncio.to_thread(self.hash, plain)

    async def verify_async(self, plain: str, digest: str) -> bool:
        return await asyncio.to_thread(self.verify, plain, digest)

    async def burn_verify(self, plain: str) -> None:
        """
        Run one verification against a throwaway digest so an unknown
        account costs as much time as a wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash_async("vermietertools-dummy-password")
        await self.verify_async(plain or "x", self._dummy_hash)
