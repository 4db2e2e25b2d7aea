"""
People who own cards or take part in shared expenses.

A share's participant is either a registered ``User`` or a ``TrustedContact``
(an unregistered person known to one user by name and email). Resolving a
free-text email to one or the other belongs to contact management, not here.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fintrack.errors import require, require_text
from fintrack.model.entity import Entity


class User(Entity):
    """A registered user of the system."""

    name: str
    email: str

    @classmethod
    def create(cls, name: str, email: str) -> User:
        require_text(name, "User name must not be null or blank.")
        require_text(email, "User email must not be null or blank.")
        return cls(name=name.strip(), email=email.strip().lower())


def _optional_text(value: str | None) -> str | None:
    return value.strip() if value is not None and value.strip() else None


class TrustedContact(Entity):
    """An unregistered person a user splits expenses with."""

    owner: User = Field(repr=False)
    name: str
    email: str
    tags: str | None = None
    note: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        owner: User,
        name: str,
        email: str,
        tags: str | None = None,
        note: str | None = None,
    ) -> TrustedContact:
        require(owner, "Owner must not be null.")
        require_text(name, "Name must not be blank.")
        require_text(email, "Email must not be blank.")
        return cls(
            owner=owner,
            name=name.strip(),
            email=email.strip().lower(),
            tags=_optional_text(tags),
            note=_optional_text(note),
        )

    def update(
        self,
        name: str | None = None,
        email: str | None = None,
        tags: str | None = None,
        note: str | None = None,
    ) -> None:
        """Update contact details; blank name/email keep the current values."""
        if name is not None and name.strip():
            self.name = name.strip()
        if email is not None and email.strip():
            self.email = email.strip().lower()
        self.tags = _optional_text(tags)
        self.note = _optional_text(note)
        self.updated_at = datetime.now()


Participant = User | TrustedContact

__all__ = ["Participant", "TrustedContact", "User"]
