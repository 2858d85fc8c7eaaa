"""File-based JSON storage for contact messages.

Backed by ``<data_dir>/contact/messages.json``. Submitting queues the admin
notification and the submitter's auto-reply on the dispatcher without
waiting; replying sends synchronously and only records the reply once the
mail went out.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from devhub.contact.models import ContactMessage, ContactStats, ContactStatus
from devhub.errors import NotFound, ValidationFailed
from devhub.notifications import messages
from devhub.notifications.dispatcher import EVENT_CONTACT_SUBMITTED, NotificationDispatcher
from devhub.pagination import Page, PageRequest, paginate
from devhub.storage import Collection

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)


class ContactLedger:
    """Append-only intake of contact messages plus admin triage operations."""

    def __init__(self, base_dir: Path, notifier: NotificationDispatcher) -> None:
        self._messages = Collection(Path(base_dir), "messages")
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _from_dict(d: dict) -> ContactMessage:
        status = ContactStatus.parse(d.get("status")) or ContactStatus.pending
        return ContactMessage(
            id=d["id"],
            name=d["name"],
            email=d["email"],
            subject=d["subject"],
            message=d["message"],
            ip_address=d.get("ip_address", ""),
            user_agent=d.get("user_agent", ""),
            status=status,
            reply_message=d.get("reply_message", ""),
            replied_at=d.get("replied_at", ""),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )

    @staticmethod
    def _to_dict(m: ContactMessage) -> dict:
        return {
            "id": m.id,
            "name": m.name,
            "email": m.email,
            "subject": m.subject,
            "message": m.message,
            "ip_address": m.ip_address,
            "user_agent": m.user_agent,
            "status": m.status.value,
            "reply_message": m.reply_message,
            "replied_at": m.replied_at,
            "created_at": m.created_at,
            "updated_at": m.updated_at,
        }

    def _require(self, message_id: str) -> ContactMessage:
        d = self._messages.get(message_id)
        if d is None:
            raise NotFound("Contact message not found")
        return self._from_dict(d)

    # ------------------------------------------------------------------
    # Public intake
    # ------------------------------------------------------------------

    def submit(
        self,
        name: str,
        email: str,
        subject: str,
        message: str,
        ip_address: str = "",
        user_agent: str = "",
    ) -> ContactMessage:
        """Record a submission (always ``pending``) and queue its notifications."""
        contact = ContactMessage(
            id=uuid.uuid4().hex,
            name=name.strip(),
            email=email.strip().lower(),
            subject=subject.strip(),
            message=message.strip(),
            ip_address=ip_address or "",
            user_agent=user_agent or "",
        )
        self._messages.insert(self._to_dict(contact))
        logger.info("Contact message %s received from %s", contact.id, contact.email)

        self._notifier.notify(EVENT_CONTACT_SUBMITTED, {
            "id": contact.id,
            "name": contact.name,
            "email": contact.email,
            "subject": contact.subject,
            "message": contact.message,
        })
        return contact

    # ------------------------------------------------------------------
    # Admin triage
    # ------------------------------------------------------------------

    def list(self, page: PageRequest, status: Optional[str] = None) -> Page[ContactMessage]:
        """Newest first. ``status`` filters only when it is a valid status value."""
        wanted = ContactStatus.parse(status) if status else None
        if wanted is None:
            docs = self._messages.find()
        else:
            docs = self._messages.find(lambda d: d.get("status") == wanted.value)
        docs.sort(key=lambda d: d.get("created_at", ""), reverse=True)
        result = paginate(docs, page)
        return Page(
            items=[self._from_dict(d) for d in result.items],
            page=result.page,
            page_size=result.page_size,
            total=result.total,
        )

    def get_one(self, message_id: str) -> ContactMessage:
        """Fetch a message, moving it from ``pending`` to ``read`` on first view."""
        def _mark_read(d: dict) -> None:
            if d.get("status") == ContactStatus.pending.value:
                d["status"] = ContactStatus.read.value
                d["updated_at"] = datetime.now(timezone.utc).isoformat()

        d = self._messages.update(message_id, _mark_read)
        if d is None:
            raise NotFound("Contact message not found")
        return self._from_dict(d)

    def reply(self, message_id: str, reply_message: str) -> ContactMessage:
        """Mail ``reply_message`` to the submitter, then mark the message replied.

        If delivery fails the stored message is left untouched and
        ``DeliveryFailed`` propagates, so the caller can retry.
        """
        reply_message = reply_message.strip()
        if not reply_message:
            raise ValidationFailed.for_field("replyMessage", "Reply message is required")
        contact = self._require(message_id)

        self._notifier.deliver(messages.contact_custom_reply(self._to_dict(contact), reply_message))

        now = datetime.now(timezone.utc).isoformat()

        def _record(d: dict) -> None:
            d["status"] = ContactStatus.replied.value
            d["reply_message"] = reply_message
            d["replied_at"] = now
            d["updated_at"] = now

        d = self._messages.update(message_id, _record)
        if d is None:
            # Deleted while the reply was in flight
            raise NotFound("Contact message not found")
        return self._from_dict(d)

    def set_status(self, message_id: str, status: str) -> ContactMessage:
        """Admin override to any lifecycle status."""
        new_status = ContactStatus.parse(status)
        if new_status is None:
            raise ValidationFailed.for_field("status", "Invalid status value")

        def _apply(d: dict) -> None:
            d["status"] = new_status.value
            d["updated_at"] = datetime.now(timezone.utc).isoformat()

        d = self._messages.update(message_id, _apply)
        if d is None:
            raise NotFound("Contact message not found")
        return self._from_dict(d)

    def delete(self, message_id: str) -> None:
        if not self._messages.delete(message_id):
            raise NotFound("Contact message not found")

    def stats(self, now: Optional[datetime] = None) -> ContactStats:
        """Totals per status plus messages created in the trailing seven days."""
        now = now or datetime.now(timezone.utc)
        cutoff = (now - RECENT_WINDOW).isoformat()
        result = ContactStats()
        for d in self._messages.find():
            result.total += 1
            status = ContactStatus.parse(d.get("status")) or ContactStatus.pending
            setattr(result, status.value, getattr(result, status.value) + 1)
            if d.get("created_at", "") >= cutoff:
                result.recent_week += 1
        return result
