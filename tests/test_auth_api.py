# tests/test_auth_api.py
"""
HTTP tests for /api/auth: login, logout, me/identity and register.
"""

from unittest.mock import AsyncMock, patch

from vermietertools.core.exceptions import StorageError
from vermietertools.core.security import SESSION_COOKIE_NAME

from conftest import ALICE_EMAIL, ALICE_PASSWORD


async def login(client, email=ALICE_EMAIL, password=ALICE_PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


class TestLoginFlow:
    """Full round trip with a real database"""

    async def test_login_me_logout_me(self, client, alice):
        response = await login(client)
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Erfolgreich angemeldet"
        assert body["user"] == {"id": alice.id, "name": "Alice", "email": ALICE_EMAIL}

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{SESSION_COOKIE_NAME}=")
        assert "httponly" in set_cookie.lower()
        token = response.cookies[SESSION_COOKIE_NAME]

        response = await client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["email"] == ALICE_EMAIL

        response = await client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Erfolgreich abgemeldet"}

        # Replaying the old token must not work either
        client.cookies.set(SESSION_COOKIE_NAME, token)
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"

    async def test_cookie_attributes(self, client, alice):
        response = await login(client)
        set_cookie = response.headers["set-cookie"].lower()

        assert "max-age=604800" in set_cookie
        assert "path=/" in set_cookie
        assert "samesite=lax" in set_cookie
        # Not production
        assert "secure" not in set_cookie

    async def test_response_never_contains_password_hash(self, client, alice):
        response = await login(client)
        assert "password_hash" not in response.text
        assert alice.password_hash not in response.text

    async def test_identity_alias(self, client, alice):
        await login(client)
        response = await client.get("/api/auth/identity")
        assert response.status_code == 200
        assert response.json()["id"] == alice.id

    async def test_each_login_creates_a_separate_session(self, client, database, alice):
        first = (await login(client)).cookies[SESSION_COOKIE_NAME]
        second = (await login(client)).cookies[SESSION_COOKIE_NAME]

        assert first != second
        assert await database.get_session(first) is not None
        assert await database.get_session(second) is not None


class TestLoginFailures:

    async def test_me_without_cookie(self, client):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Nicht angemeldet", "code": "unauthenticated"}

    async def test_me_with_garbage_cookie(self, client):
        client.cookies.set(SESSION_COOKIE_NAME, "not-a-real-token")
        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    async def test_wrong_password_and_unknown_email_look_identical(self, client, alice):
        wrong_password = await login(client, password="nope-nope")
        unknown_email = await login(client, email="mallory@example.com")

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json()["error"] == "Ungültige E-Mail oder Passwort"
        assert SESSION_COOKIE_NAME not in wrong_password.cookies

    async def test_missing_fields_never_touch_storage(self, client, database):
        with patch.object(database, "get_user_by_email", AsyncMock()) as lookup:
            for payload in ({}, {"email": ALICE_EMAIL}, {"password": "x"}, {"email": "", "password": ""}):
                response = await client.post("/api/auth/login", json=payload)
                assert response.status_code == 400
                assert response.json()["error"] == "E-Mail und Passwort sind erforderlich"

            lookup.assert_not_called()

    async def test_malformed_json_is_400(self, client):
        response = await client.post(
            "/api/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Ungültige Anfrage", "code": "validation_error"}

    async def test_storage_failure_during_login_is_generic_500(self, client, database):
        failure = StorageError("connection refused to 10.0.0.5", service_name="DatabaseService")
        with patch.object(database, "get_user_by_email", AsyncMock(side_effect=failure)):
            response = await login(client)

        assert response.status_code == 500
        assert response.json() == {"error": "Interner Serverfehler", "code": "storage_error"}
        assert "10.0.0.5" not in response.text

    async def test_storage_failure_during_session_creation(self, client, database, alice):
        failure = StorageError("disk full", service_name="DatabaseService")
        with patch.object(database, "insert_session", AsyncMock(side_effect=failure)):
            response = await login(client)

        assert response.status_code == 500
        assert "disk full" not in response.text
        assert SESSION_COOKIE_NAME not in response.cookies

    async def test_storage_failure_during_resolution_means_anonymous(self, client, database, alice):
        await login(client)
        failure = StorageError("timeout", service_name="DatabaseService")
        with patch.object(database, "get_session", AsyncMock(side_effect=failure)):
            response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"


class TestLogout:

    async def test_logout_without_session_succeeds(self, client):
        response = await client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Erfolgreich abgemeldet"

    async def test_logout_twice(self, client, alice):
        await login(client)
        assert (await client.post("/api/auth/logout")).status_code == 200
        assert (await client.post("/api/auth/logout")).status_code == 200

    async def test_logout_clears_cookie(self, client, alice):
        await login(client)
        response = await client.post("/api/auth/logout")

        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{SESSION_COOKIE_NAME}=")
        assert "max-age=0" in set_cookie

    async def test_logout_removes_session_row(self, client, database, alice):
        token = (await login(client)).cookies[SESSION_COOKIE_NAME]
        await client.post("/api/auth/logout")
        assert await database.get_session(token) is None

    async def test_logout_storage_failure(self, client, database, alice):
        await login(client)
        failure = StorageError("gone", service_name="DatabaseService")
        with patch.object(database, "delete_sessions", AsyncMock(side_effect=failure)):
            response = await client.post("/api/auth/logout")

        assert response.status_code == 500
        assert response.json()["error"] == "Fehler beim Abmelden"
        assert "max-age=0" in response.headers["set-cookie"].lower()


class TestRegister:

    async def test_register_logs_in(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"name": "Bob", "email": "bob@example.com", "password": "hunter22"},
        )
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "bob@example.com"
        assert SESSION_COOKIE_NAME in response.cookies

        me = await client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["name"] == "Bob"

    async def test_registered_user_can_login(self, client):
        await client.post(
            "/api/auth/register",
            json={"name": "Bob", "email": "bob@example.com", "password": "hunter22"},
        )
        client.cookies.clear()

        response = await login(client, email="bob@example.com", password="hunter22")
        assert response.status_code == 200

    async def test_duplicate_email(self, client, alice):
        response = await client.post(
            "/api/auth/register",
            json={"name": "Alice 2", "email": ALICE_EMAIL, "password": "another1"},
        )
        assert response.status_code == 409
        assert response.json() == {"error": "E-Mail ist bereits registriert", "code": "conflict"}

    async def test_invalid_input(self, client):
        cases = [
            {"email": "bob@example.com", "password": "hunter22"},
            {"name": "Bob", "email": "bob.example.com", "password": "hunter22"},
            {"name": "Bob", "email": "bob@example.com", "password": "123"},
        ]
        for payload in cases:
            response = await client.post("/api/auth/register", json=payload)
            assert response.status_code == 400, payload
            assert SESSION_COOKIE_NAME not in response.cookies
