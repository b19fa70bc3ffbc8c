# vermietertools/models/identity.py

from datetime import datetime, timezone
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps (SQLite) are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UserRecord(BaseModel):
    """
    Gespeicherter Benutzer. Der Passwort-Hash verlässt nie den Server.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    password_hash: str

    def to_identity(self) -> "Identity":
        return Identity(user_id=self.id, email=self.email, name=self.name)


class SessionRecord(BaseModel):
    """
    Eine Sitzung ist nach dem Anlegen unveränderlich. Gültig genau dann,
    wenn sie existiert und expires_at strikt in der Zukunft liegt.
    """
    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return as_utc(self.expires_at) <= as_utc(now)


class Identity(BaseModel):
    """
    Wer stellt diese Anfrage? Wird pro Request aus einer gültigen Sitzung
    abgeleitet und nie gespeichert.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: str

    def public(self) -> Dict[str, str]:
        return {"id": self.user_id, "name": self.name, "email": self.email}
