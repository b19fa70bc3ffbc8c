# tests/core/test_config.py

import pytest
from pydantic import ValidationError as SettingsValidationError

from vermietertools.core.config import Settings, validate_required_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("APP_ENV", "ENVIRONMENT", "DATABASE_URL", "SESSION_BACKEND",
                "REDIS_URL", "REDIS_DIRECT_URI", "BCRYPT_ROUNDS"):
        monkeypatch.delenv(var, raising=False)


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.APP_ENV == "development"
        assert not settings.is_production
        assert settings.SESSION_BACKEND == "database"
        assert settings.BCRYPT_ROUNDS == 12
        assert settings.LOGIN_PATH == "/login"

    def test_environment_alias(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert Settings(_env_file=None).is_production

    def test_redis_uri_alias(self, monkeypatch):
        monkeypatch.setenv("REDIS_DIRECT_URI", "redis://cache:6379/1")
        assert Settings(_env_file=None).REDIS_URL == "redis://cache:6379/1"

    def test_backend_is_normalized(self, monkeypatch):
        monkeypatch.setenv("SESSION_BACKEND", " Redis ")
        assert Settings(_env_file=None).SESSION_BACKEND == "redis"

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_bcrypt_rounds_range(self, rounds):
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None, BCRYPT_ROUNDS=rounds)


class TestValidateRequiredSettings:

    def test_development_defaults_are_fine(self):
        assert validate_required_settings(Settings(_env_file=None))

    def test_sqlite_in_production(self):
        settings = Settings(_env_file=None, APP_ENV="production")
        assert not validate_required_settings(settings)

    def test_redis_backend_without_url(self):
        settings = Settings(_env_file=None, SESSION_BACKEND="redis")
        assert not validate_required_settings(settings)

    def test_unknown_backend(self):
        settings = Settings(_env_file=None, SESSION_BACKEND="memcached")
        assert not validate_required_settings(settings)
