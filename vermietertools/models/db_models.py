# vermietertools/models/db_models.py
"""
ORM tables of the Credential Store and the Session Store.

Properties, units and people reference users.id as their owner; those tables
belong to the CRUD part of the application and are not defined here.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from vermietertools.models.identity import SessionRecord, UserRecord, as_utc, utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    sessions: Mapped[List[Session]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            email=self.email,
            name=self.name,
            password_hash=self.password_hash,
        )

    def __repr__(self):
        return f"<User {self.id}>"


class Session(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[User] = relationship(back_populates="sessions")

    @classmethod
    def from_record(cls, record: SessionRecord) -> "Session":
        return cls(
            token=record.token,
            user_id=record.user_id,
            expires_at=as_utc(record.expires_at),
            created_at=as_utc(record.created_at),
        )

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            token=self.token,
            user_id=self.user_id,
            expires_at=as_utc(self.expires_at),
            created_at=as_utc(self.created_at),
        )

    def __repr__(self):
        # Token bleibt aus Logs heraus
        return f"<Session {self.id} user={self.user_id}>"
