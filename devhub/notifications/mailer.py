"""Mail transports.

:class:`SMTPMailer` delivers through ``smtplib`` (no extra dependencies).
When no SMTP host is configured, :func:`build_mailer` returns a
:class:`LogMailer` that only logs messages, so a development setup works
without a relay.
"""

from __future__ import annotations

import logging
import smtplib
import threading
import uuid
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

from devhub.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class OutgoingMail:
    """A single plain-text message."""

    to: str
    subject: str
    body: str
    reply_to: str = ""


class Mailer:
    """Transport interface. ``send`` returns a message id or raises."""

    def send(self, mail: OutgoingMail) -> str:
        raise NotImplementedError


class SMTPMailer(Mailer):
    """Deliver via an SMTP relay (STARTTLS + login when credentials are set)."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        user: str = "",
        password: str = "",
        sender: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.starttls = starttls
        self.timeout = timeout

    def _build(self, mail: OutgoingMail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = mail.to
        msg["Subject"] = mail.subject
        msg["Message-ID"] = make_msgid(domain=self.host)
        if mail.reply_to:
            msg["Reply-To"] = mail.reply_to
        msg.set_content(mail.body)
        return msg

    def send(self, mail: OutgoingMail) -> str:
        msg = self._build(mail)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)
        return msg["Message-ID"]


class LogMailer(Mailer):
    """Records and logs messages instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[OutgoingMail] = []
        self._lock = threading.Lock()

    def send(self, mail: OutgoingMail) -> str:
        message_id = f"<{uuid.uuid4().hex}@devhub.local>"
        with self._lock:
            self.sent.append(mail)
        logger.info("Mail (not sent, no SMTP host) to=%s subject=%r", mail.to, mail.subject)
        return message_id


def build_mailer(settings: Settings) -> Mailer:
    if not settings.mail_enabled:
        return LogMailer()
    return SMTPMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.mail_from,
        starttls=settings.smtp_starttls,
    )
