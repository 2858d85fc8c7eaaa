"""Auth domain models for users and sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Role(str, Enum):
    """Role hierarchy: admin > member."""

    admin = "admin"
    member = "member"

    @property
    def level(self) -> int:
        """Return numeric level for comparison (higher = more privileges)."""
        return {
            Role.admin: 20,
            Role.member: 10,
        }[self]


@dataclass
class User:
    """A registered account.

    ``password_hash`` never leaves the identity directory; response models
    list their fields explicitly.
    """

    id: str
    username: str
    email: str
    password_hash: str = field(default="", repr=False)
    avatar_url: str = ""
    bio: str = ""
    role: Role = Role.member
    is_active: bool = True
    created_at: str = ""
    last_login: str = ""

    def __post_init__(self) -> None:
        self.email = self.email.lower()
        if not self.created_at:
            self.created_at = utcnow_iso()
        if isinstance(self.role, str):
            self.role = Role(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


@dataclass
class Session:
    """An issued session token, keyed by the token's ``jti`` claim.

    Deleting the row revokes the token.
    """

    id: str
    user_id: str
    created_at: str = ""
    expires_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
