"""Contact intake: inbound messages with a pending/read/replied lifecycle."""

from devhub.contact.ledger import ContactLedger
from devhub.contact.models import ContactMessage, ContactStats, ContactStatus

__all__ = ["ContactLedger", "ContactMessage", "ContactStats", "ContactStatus"]
