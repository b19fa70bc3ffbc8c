# tests/core/test_authentication.py
"""
Unit tests for the Authenticator (login and registration rules).
"""

from unittest.mock import AsyncMock, patch

import pytest

from vermietertools.core.exceptions import AuthenticationError, ConflictError, ValidationError
from vermietertools.core.security import Authenticator


@pytest.fixture
def authenticator(database, hasher):
    return Authenticator(database, hasher)


class TestAuthenticate:

    async def test_success(self, authenticator, alice):
        user = await authenticator.authenticate("alice@example.com", "secret123")
        assert user.id == alice.id

    async def test_email_is_exact_match(self, authenticator, alice):
        with pytest.raises(AuthenticationError):
            await authenticator.authenticate("Alice@Example.com", "secret123")

    async def test_wrong_password_and_unknown_email_same_error(self, authenticator, alice):
        with pytest.raises(AuthenticationError) as wrong_password:
            await authenticator.authenticate("alice@example.com", "wrong-password")
        with pytest.raises(AuthenticationError) as unknown:
            await authenticator.authenticate("nobody@example.com", "secret123")

        assert wrong_password.value.public_message == unknown.value.public_message
        assert wrong_password.value.error_code == unknown.value.error_code

    async def test_unknown_email_still_hashes(self, authenticator, hasher):
        with patch.object(hasher, "burn_verify", AsyncMock()) as burn:
            with pytest.raises(AuthenticationError):
                await authenticator.authenticate("nobody@example.com", "secret123")
        burn.assert_awaited_once_with("secret123")

    @pytest.mark.parametrize("email,password", [
        (None, "secret123"),
        ("alice@example.com", None),
        ("", ""),
    ])
    async def test_missing_fields(self, hasher, email, password):
        credentials = AsyncMock()
        authenticator = Authenticator(credentials, hasher)

        with pytest.raises(ValidationError):
            await authenticator.authenticate(email, password)
        credentials.get_user_by_email.assert_not_called()


class TestRegister:

    async def test_register_hashes_password(self, authenticator, database, hasher):
        user = await authenticator.register("  Bob ", "bob@example.com", "hunter22")

        assert user.name == "Bob"
        assert user.password_hash != "hunter22"
        assert hasher.verify("hunter22", user.password_hash)
        assert (await database.get_user_by_email("bob@example.com")).id == user.id

    async def test_duplicate(self, authenticator, alice):
        with pytest.raises(ConflictError) as exc_info:
            await authenticator.register("Alice", "alice@example.com", "secret123")
        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize("name,email,password,field", [
        ("Bob", "bob.example.com", "hunter22", "email"),
        ("Bob", "bob@example.com", "12345", "password"),
    ])
    async def test_invalid_fields(self, authenticator, name, email, password, field):
        with pytest.raises(ValidationError) as exc_info:
            await authenticator.register(name, email, password)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("name,email,password", [
        (None, "bob@example.com", "hunter22"),
        ("   ", "bob@example.com", "hunter22"),
        ("Bob", None, "hunter22"),
        ("Bob", "bob@example.com", ""),
    ])
    async def test_missing_fields(self, authenticator, name, email, password):
        with pytest.raises(ValidationError):
            await authenticator.register(name, email, password)
