"""Bounded background dispatcher for notification mail.

``notify`` composes the messages for an event and hands each one to a
thread pool; failures are logged and dropped, never raised to the caller.
``deliver`` sends synchronously and raises :class:`DeliveryFailed`, for
operations whose success depends on the mail going out.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for
from typing import Optional

from devhub.auth.store import UserStore
from devhub.errors import DeliveryFailed
from devhub.notifications import messages
from devhub.notifications.mailer import Mailer, OutgoingMail

logger = logging.getLogger(__name__)

EVENT_CONTACT_SUBMITTED = "contact.submitted"
EVENT_COMMENT_ADDED = "comment.added"
EVENT_REPLY_ADDED = "reply.added"


class NotificationDispatcher:
    """Fire-and-forget and synchronous mail delivery over one :class:`Mailer`."""

    def __init__(
        self,
        mailer: Mailer,
        admin_recipient: str = "",
        users: Optional[UserStore] = None,
        max_workers: int = 4,
    ) -> None:
        self.mailer = mailer
        self.admin_recipient = admin_recipient
        self._users = users
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _compose(self, event_kind: str, payload: dict) -> list[OutgoingMail]:
        if event_kind == EVENT_CONTACT_SUBMITTED:
            mails = [messages.contact_auto_reply(payload)]
            if self.admin_recipient:
                mails.insert(0, messages.contact_admin_notification(payload, self.admin_recipient))
            else:
                logger.warning("No admin recipient configured; skipping contact notification")
            return mails

        if event_kind in (EVENT_COMMENT_ADDED, EVENT_REPLY_ADDED):
            if self._users is None or payload["author_id"] == payload["item_author_id"]:
                return []
            owner = self._users.get_user(payload["item_author_id"])
            if owner is None or not owner.is_active:
                return []
            author = self._users.get_user(payload["author_id"])
            author_name = author.username if author else "Someone"
            return [messages.engagement_notification(event_kind, payload, owner.email, author_name)]

        logger.warning("Unknown notification event %r", event_kind)
        return []

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _send_logged(self, event_kind: str, mail: OutgoingMail) -> Optional[str]:
        try:
            message_id = self.mailer.send(mail)
        except Exception:
            logger.exception("%s notification to %s failed", event_kind, mail.to)
            return None
        logger.info("%s notification sent to %s (%s)", event_kind, mail.to, message_id)
        return message_id

    def _track(self, future: Future) -> None:
        with self._lock:
            self._pending.add(future)

        def _done(f: Future) -> None:
            with self._lock:
                self._pending.discard(f)

        future.add_done_callback(_done)

    def notify(self, event_kind: str, payload: dict) -> list[Future]:
        """Queue every message for ``event_kind``; returns without waiting."""
        try:
            mails = self._compose(event_kind, payload)
        except Exception:
            logger.exception("Could not compose %s notification", event_kind)
            return []

        futures = []
        for mail in mails:
            future = self._executor.submit(self._send_logged, event_kind, mail)
            self._track(future)
            futures.append(future)
        return futures

    def deliver(self, mail: OutgoingMail) -> str:
        """Send now. Raises ``DeliveryFailed`` if the transport fails."""
        try:
            message_id = self.mailer.send(mail)
        except Exception as exc:
            logger.error("Delivery to %s failed: %s", mail.to, exc)
            raise DeliveryFailed("Failed to send reply email. Please try again.") from exc
        logger.info("Delivered mail to %s (%s)", mail.to, message_id)
        return message_id

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every queued notification has finished."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait_for(pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
