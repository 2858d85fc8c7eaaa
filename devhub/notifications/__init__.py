"""Outbound notifications: plain-text mail composed per event and sent
through a bounded background dispatcher.
"""

from devhub.notifications.dispatcher import NotificationDispatcher
from devhub.notifications.mailer import LogMailer, Mailer, OutgoingMail, SMTPMailer, build_mailer

__all__ = [
    "LogMailer",
    "Mailer",
    "NotificationDispatcher",
    "OutgoingMail",
    "SMTPMailer",
    "build_mailer",
]
