"""Contact intake domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class ContactStatus(str, Enum):
    """Message lifecycle: pending -> read -> replied."""

    pending = "pending"
    read = "read"
    replied = "replied"

    @classmethod
    def parse(cls, value: object) -> "ContactStatus | None":
        """Return the matching status, or None for anything else."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class ContactMessage:
    """A message submitted through the public contact form."""

    id: str
    name: str
    email: str
    subject: str
    message: str
    ip_address: str = ""
    user_agent: str = ""
    status: ContactStatus = ContactStatus.pending
    reply_message: str = ""
    replied_at: str = ""
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at
        if isinstance(self.status, str):
            self.status = ContactStatus(self.status)

    @property
    def replied(self) -> bool:
        return self.status == ContactStatus.replied


@dataclass
class ContactStats:
    total: int = 0
    pending: int = 0
    read: int = 0
    replied: int = 0
    recent_week: int = 0
