"""Contact router -- public intake plus admin triage of contact messages."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from devhub.auth.models import User
from devhub.pagination import PageRequest
from devhub.services import Services
from web.backend.app.middleware.auth import get_services, require_admin
from web.backend.app.models.api import (
    ContactEnvelope,
    ContactListResponse,
    ContactReceipt,
    ContactReceiptEnvelope,
    ContactReplyRequest,
    ContactRequest,
    ContactStatsResponse,
    ContactStatusRequest,
    MessageResponse,
)
from web.backend.app.presenters import contact_response

router = APIRouter(prefix="/api/contact", tags=["contact"])

CONTACT_PAGE_SIZE = 20


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


@router.post(
    "",
    response_model=ContactReceiptEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a contact message",
)
async def submit_contact(
    body: ContactRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    """Public endpoint. Notification e-mails are sent in the background."""
    contact = services.contacts.submit(
        body.name,
        body.email,
        body.subject,
        body.message,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return ContactReceiptEnvelope(
        message="Message sent successfully! We'll get back to you soon.",
        contact=ContactReceipt(
            id=contact.id,
            name=contact.name,
            email=contact.email,
            subject=contact.subject,
            created_at=contact.created_at,
        ),
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.get("", response_model=ContactListResponse, summary="List contact messages (admin)")
async def list_contacts(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    result = services.contacts.list(
        PageRequest.parse(page, limit, default_size=CONTACT_PAGE_SIZE),
        status=status,
    )
    return ContactListResponse(
        contacts=[contact_response(m) for m in result.items],
        pagination=result.pagination("Contacts"),
    )


@router.get("/stats/summary", response_model=ContactStatsResponse, summary="Contact statistics (admin)")
async def contact_stats(
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    stats = services.contacts.stats()
    return ContactStatsResponse(
        total=stats.total,
        pending=stats.pending,
        read=stats.read,
        replied=stats.replied,
        recent_week=stats.recent_week,
    )


@router.get("/{contact_id}", response_model=ContactEnvelope, summary="Get a contact message (admin)")
async def get_contact(
    contact_id: str,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Viewing a pending message marks it read."""
    return ContactEnvelope(contact=contact_response(services.contacts.get_one(contact_id)))


@router.post("/{contact_id}/reply", response_model=ContactEnvelope, summary="Reply by e-mail (admin)")
def reply_contact(
    contact_id: str,
    body: ContactReplyRequest,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Send the reply synchronously. A failed send leaves the status as it was (502).

    SMTP delivery blocks; keep this a plain ``def`` so it runs in the threadpool.
    """
    contact = services.contacts.reply(contact_id, body.reply_message)
    return ContactEnvelope(message="Reply sent successfully", contact=contact_response(contact))


@router.patch("/{contact_id}/status", response_model=ContactEnvelope, summary="Set status (admin)")
async def set_contact_status(
    contact_id: str,
    body: ContactStatusRequest,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    contact = services.contacts.set_status(contact_id, body.status.value)
    return ContactEnvelope(message="Status updated successfully", contact=contact_response(contact))


@router.delete("/{contact_id}", response_model=MessageResponse, summary="Delete a contact message (admin)")
async def delete_contact(
    contact_id: str,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    services.contacts.delete(contact_id)
    return MessageResponse(message="Contact message deleted successfully")
