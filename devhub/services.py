"""Component wiring: one container per process, built from :class:`Settings`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from devhub.auth.store import UserStore
from devhub.config import Settings
from devhub.contact.ledger import ContactLedger
from devhub.content import BLOG_POST, FORUM_THREAD, ContentStore
from devhub.notifications import Mailer, NotificationDispatcher, build_mailer


@dataclass
class Services:
    settings: Settings
    users: UserStore
    posts: ContentStore
    threads: ContentStore
    contacts: ContactLedger
    dispatcher: NotificationDispatcher

    @classmethod
    def build(cls, settings: Settings, mailer: Optional[Mailer] = None) -> "Services":
        """Create every store under ``settings.data_dir``.

        ``mailer`` overrides the transport chosen from the SMTP settings.
        """
        data_dir = settings.data_dir
        users = UserStore(
            data_dir / "auth",
            token_secret=settings.jwt_secret,
            token_ttl=timedelta(days=settings.token_ttl_days),
            admin_emails=settings.admin_emails,
        )
        dispatcher = NotificationDispatcher(
            mailer or build_mailer(settings),
            admin_recipient=settings.admin_recipient,
            users=users,
            max_workers=settings.notify_workers,
        )
        content_dir = data_dir / "content"
        return cls(
            settings=settings,
            users=users,
            posts=ContentStore(BLOG_POST, content_dir, notify=dispatcher.notify),
            threads=ContentStore(FORUM_THREAD, content_dir, notify=dispatcher.notify),
            contacts=ContactLedger(data_dir / "contact", dispatcher),
            dispatcher=dispatcher,
        )

    def close(self) -> None:
        self.dispatcher.shutdown(wait=True)
