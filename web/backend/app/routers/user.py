"""User router -- public profiles and self-service account management."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from devhub.auth.models import User
from devhub.errors import NotFound
from devhub.pagination import PageRequest
from devhub.services import Services
from web.backend.app.middleware.auth import get_current_user, get_services
from web.backend.app.models.api import (
    BlogPostListResponse,
    ForumThreadListResponse,
    MessageResponse,
    PasswordChangeRequest,
    ProfileEnvelope,
    ProfileUpdateRequest,
    PublicUserEnvelope,
    PublicUserResponse,
    UserStats,
)
from web.backend.app.presenters import post_responses, thread_responses, user_response

router = APIRouter(prefix="/api/user", tags=["user"])


def _active_user(services: Services, user_id: str) -> User:
    user = services.users.get_user(user_id)
    if user is None or not user.is_active:
        raise NotFound("User not found")
    return user


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------


@router.put("/profile", response_model=ProfileEnvelope, summary="Update own profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    updated = services.users.update_profile(
        user.id,
        bio=body.bio,
        avatar_url=body.avatar,
    )
    return ProfileEnvelope(message="Profile updated successfully", user=user_response(updated))


@router.put("/password", response_model=MessageResponse, summary="Change own password")
async def change_password(
    body: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.users.update_credential(user.id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


@router.delete("/account", response_model=MessageResponse, summary="Deactivate own account")
async def delete_account(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Soft delete: the account is deactivated and its sessions revoked.

    Authored content stays in place.
    """
    services.users.deactivate(user.id)
    return MessageResponse(message="Account deactivated successfully")


# ---------------------------------------------------------------------------
# Public profiles
# ---------------------------------------------------------------------------


@router.get("/{user_id}", response_model=PublicUserEnvelope, summary="Public profile")
async def get_user(user_id: str, services: Services = Depends(get_services)):
    user = _active_user(services, user_id)
    stats = UserStats(
        blog_posts=services.posts.count_by_author(user.id),
        forum_threads=services.threads.count_by_author(user.id),
        comments=(
            services.posts.count_engagements_by_author(user.id)
            + services.threads.count_engagements_by_author(user.id)
        ),
    )
    return PublicUserEnvelope(
        user=PublicUserResponse(
            id=user.id,
            username=user.username,
            avatar=user.avatar_url,
            bio=user.bio,
            created_at=user.created_at,
            stats=stats,
        )
    )


@router.get("/{user_id}/posts", response_model=BlogPostListResponse, summary="A user's posts")
async def user_posts(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    services: Services = Depends(get_services),
):
    user = _active_user(services, user_id)
    result = services.posts.list_by_author(user.id, PageRequest.parse(page, limit))
    return BlogPostListResponse(
        posts=post_responses(result.items, services.users),
        pagination=result.pagination("Posts"),
    )


@router.get("/{user_id}/threads", response_model=ForumThreadListResponse, summary="A user's threads")
async def user_threads(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    services: Services = Depends(get_services),
):
    user = _active_user(services, user_id)
    result = services.threads.list_by_author(user.id, PageRequest.parse(page, limit))
    return ForumThreadListResponse(
        threads=thread_responses(result.items, services.users),
        pagination=result.pagination("Threads"),
    )
