# vermietertools/core/config.py
from functools import lru_cache
from typing import List, Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Grundlegende Anwendungseinstellungen"""
    APP_NAME: str = "Vermietertools"
    APP_ENV: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "ENVIRONMENT"))
    DEBUG: bool = False

    # Datenbank (Benutzer und Sitzungen)
    DATABASE_URL: str = "sqlite+aiosqlite:///./vermietertools.db"
    DATABASE_ECHO: bool = False
    DATABASE_CREATE_SCHEMA: bool = True

    # Sitzungsspeicher: "database" oder "redis"
    SESSION_BACKEND: str = "database"
    REDIS_URL: Optional[str] = Field(default=None, validation_alias=AliasChoices("REDIS_URL", "REDIS_DIRECT_URI"))

    # Passwort-Hashing (bcrypt cost factor)
    BCRYPT_ROUNDS: int = 12

    # Seiten ohne Sitzung werden hierhin umgeleitet
    LOGIN_PATH: str = "/login"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    # X-Forwarded-For / X-Real-IP nur hinter einem eigenen Proxy auswerten
    TRUST_PROXY_HEADERS: bool = False

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("SESSION_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        return str(v or "database").strip().lower()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_rounds(cls, v: int) -> int:
        # bcrypt accepts 4..31
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings werden einmal pro Prozess geladen"""
    return Settings()


def validate_required_settings(settings: Settings) -> bool:
    """Prüft riskante Kombinationen; warnt nur, bricht nie ab"""
    problems = []

    if settings.is_production and settings.DATABASE_URL.startswith("sqlite"):
        problems.append("SQLite database in production")

    if settings.SESSION_BACKEND == "redis" and not settings.REDIS_URL:
        problems.append("SESSION_BACKEND=redis without REDIS_URL")

    if settings.SESSION_BACKEND not in ("database", "redis"):
        problems.append(f"unknown SESSION_BACKEND '{settings.SESSION_BACKEND}'")

    if problems:
        logger.warning(f"Konfigurationsprobleme: {', '.join(problems)}")
        logger.warning("Die Anwendung kann möglicherweise nicht alle Funktionen bereitstellen.")
        return False

    return True
