# vermietertools/core/security/authentication.py
"""
Credential checks for login and registration.

Login never tells the caller whether an email exists: unknown email and
wrong password raise the same AuthenticationError after the same amount
of bcrypt work.
"""

import logging
from typing import Optional

from vermietertools.core.exceptions import (
    AuthenticationError,
    ValidationError,
    validation_error,
)
from vermietertools.core.security.passwords import PasswordHasher
from vermietertools.models.identity import UserRecord
from vermietertools.services.store_base import CredentialStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class Authenticator:
    def __init__(self, credentials: CredentialStore, hasher: PasswordHasher):
        self._credentials = credentials
        self._hasher = hasher

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> UserRecord:
        """
        Check email and password.

        Raises:
            ValidationError: If either field is missing (storage is not touched)
            AuthenticationError: If the credentials do not match
            StorageError: If the credential lookup failed
        """
        if not email or not password:
            raise ValidationError("E-Mail und Passwort sind erforderlich")

        user = await self._credentials.get_user_by_email(email)
        if user is None:
            await self._hasher.burn_verify(password)
            logger.debug("Login rejected: unknown account")
            raise AuthenticationError()

        if not await self._hasher.verify_async(password, user.password_hash):
            logger.debug(f"Login rejected: wrong password for user {user.id}")
            raise AuthenticationError()

        return user

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str]
    ) -> UserRecord:
        """
        Create a new user with a hashed password.

        Raises:
            ValidationError: On missing or malformed fields
            ConflictError: If the email is already registered
            StorageError: If the user could not be stored
        """
        if not name or not name.strip() or not email or not password:
            raise ValidationError("Name, E-Mail und Passwort sind erforderlich")

        if "@" not in email:
            raise validation_error("Ungültige E-Mail-Adresse", "email")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise validation_error(
                f"Passwort muss mindestens {MIN_PASSWORD_LENGTH} Zeichen lang sein",
                "password"
            )

        digest = await self._hasher.hash_async(password)
        user = await self._credentials.create_user(email=email, name=name.strip(), password_hash=digest)
        logger.info(f"👤 Registered user {user.id}")
        return user
