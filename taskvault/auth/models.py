"""
Account models.

Account is the stored record (includes the bcrypt hash) and never leaves the
auth package; AccountPublic and Principal are the only shapes handed out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(BaseModel):
    """Stored account record."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)

    def public(self) -> "AccountPublic":
        return AccountPublic(id=self.id, name=self.name, email=self.email)


class AccountPublic(BaseModel):
    id: str
    name: str
    email: str


class Principal(BaseModel):
    """The resolved, trusted identity attached to a request."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
