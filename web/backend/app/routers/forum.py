"""Forum router -- threads, replies, categories and moderation."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from devhub.auth.models import User
from devhub.pagination import PageRequest
from devhub.services import Services
from web.backend.app.middleware.auth import get_current_user, get_services, require_admin
from web.backend.app.models.api import (
    CategoriesResponse,
    ForumThreadEnvelope,
    ForumThreadListResponse,
    ForumThreadRequest,
    MessageResponse,
    ModerationRequest,
    ReplyEnvelope,
    ReplyRequest,
)
from web.backend.app.presenters import AuthorDirectory, engagement_response, thread_response, thread_responses

router = APIRouter(prefix="/api/forum", tags=["forum"])


# ---------------------------------------------------------------------------
# Threads
# ---------------------------------------------------------------------------


@router.get("", response_model=ForumThreadListResponse, summary="List threads")
async def list_threads(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    category: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """Pinned threads first, then by most recent activity.

    ``category=all`` (or no category) lists every thread.
    """
    result = services.threads.list(PageRequest.parse(page, limit), category=category)
    return ForumThreadListResponse(
        threads=thread_responses(result.items, services.users),
        pagination=result.pagination("Threads"),
    )


@router.get("/categories/list", response_model=CategoriesResponse, summary="List categories")
async def list_categories(services: Services = Depends(get_services)):
    return CategoriesResponse(categories=services.threads.categories())


@router.get("/{thread_id}", response_model=ForumThreadEnvelope, summary="Get a thread")
async def get_thread(thread_id: str, services: Services = Depends(get_services)):
    thread = services.threads.get_one(thread_id)
    return ForumThreadEnvelope(thread=thread_response(thread, AuthorDirectory(services.users)))


@router.post(
    "",
    response_model=ForumThreadEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a thread",
)
async def create_thread(
    body: ForumThreadRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    thread = services.threads.create(user.id, body.title, body.content, category=body.category)
    return ForumThreadEnvelope(
        message="Forum thread created successfully",
        thread=thread_response(thread, AuthorDirectory(services.users)),
    )


@router.put("/{thread_id}", response_model=ForumThreadEnvelope, summary="Update a thread")
async def update_thread(
    thread_id: str,
    body: ForumThreadRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Author only. Locked threads cannot be edited, not even by their author."""
    thread = services.threads.update(
        thread_id,
        user.id,
        body.title,
        body.content,
        category=body.category,
    )
    return ForumThreadEnvelope(
        message="Forum thread updated successfully",
        thread=thread_response(thread, AuthorDirectory(services.users)),
    )


@router.delete("/{thread_id}", response_model=MessageResponse, summary="Delete a thread")
async def delete_thread(
    thread_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.threads.delete(thread_id, user.id)
    return MessageResponse(message="Forum thread deleted successfully")


@router.patch(
    "/{thread_id}/moderation",
    response_model=ForumThreadEnvelope,
    summary="Pin or lock a thread (admin)",
)
async def moderate_thread(
    thread_id: str,
    body: ModerationRequest,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services),
):
    thread = services.threads.set_moderation(
        thread_id,
        is_pinned=body.is_pinned,
        is_locked=body.is_locked,
    )
    return ForumThreadEnvelope(
        message="Thread moderation updated",
        thread=thread_response(thread, AuthorDirectory(services.users)),
    )


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------


@router.post(
    "/{thread_id}/replies",
    response_model=ReplyEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Reply to a thread",
)
async def add_reply(
    thread_id: str,
    body: ReplyRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    reply = services.threads.add_engagement(thread_id, user.id, body.text)
    return ReplyEnvelope(
        message="Reply added successfully",
        reply=engagement_response(reply, AuthorDirectory(services.users)),
    )


@router.delete(
    "/{thread_id}/replies/{reply_id}",
    response_model=MessageResponse,
    summary="Delete a reply",
)
async def delete_reply(
    thread_id: str,
    reply_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.threads.remove_engagement(thread_id, reply_id, user.id)
    return MessageResponse(message="Reply deleted successfully")
