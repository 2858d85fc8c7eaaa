"""Convert devhub dataclasses into API response models.

Author display fields are looked up from the identity directory at read
time; nothing about the author is copied into stored content.
"""

from __future__ import annotations

from typing import Iterable

from devhub.auth.models import User
from devhub.auth.store import UserStore
from devhub.contact.models import ContactMessage
from devhub.content.models import ContentItem, Engagement
from web.backend.app.models.api import (
    AuthorSummary,
    BlogPostResponse,
    ContactResponse,
    EngagementResponse,
    ForumThreadResponse,
    UserResponse,
)


class AuthorDirectory:
    """Per-request cache of :class:`AuthorSummary` by user id."""

    def __init__(self, users: UserStore) -> None:
        self._users = users
        self._cache: dict[str, AuthorSummary] = {}

    def get(self, user_id: str) -> AuthorSummary:
        if user_id not in self._cache:
            user = self._users.get_user(user_id)
            if user is None:
                self._cache[user_id] = AuthorSummary(id=user_id, username="[deleted]")
            else:
                self._cache[user_id] = AuthorSummary(id=user.id, username=user.username, avatar=user.avatar_url)
        return self._cache[user_id]


def user_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        username=u.username,
        email=u.email,
        avatar=u.avatar_url,
        bio=u.bio,
        role=u.role.value,
        last_login=u.last_login,
        created_at=u.created_at,
    )


def engagement_response(e: Engagement, authors: AuthorDirectory) -> EngagementResponse:
    return EngagementResponse(
        id=e.id,
        author=authors.get(e.author_id),
        text=e.text,
        created_at=e.created_at,
    )


def post_response(item: ContentItem, authors: AuthorDirectory) -> BlogPostResponse:
    return BlogPostResponse(
        id=item.id,
        title=item.title,
        content=item.body,
        author=authors.get(item.author_id),
        image=item.image_url,
        tags=item.tags,
        is_published=item.is_published,
        views=item.views,
        comments=[engagement_response(e, authors) for e in item.engagements],
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def thread_response(item: ContentItem, authors: AuthorDirectory) -> ForumThreadResponse:
    return ForumThreadResponse(
        id=item.id,
        title=item.title,
        content=item.body,
        author=authors.get(item.author_id),
        category=item.category,
        is_pinned=item.is_pinned,
        is_locked=item.is_locked,
        views=item.views,
        replies=[engagement_response(e, authors) for e in item.engagements],
        last_activity=item.last_activity,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def post_responses(items: Iterable[ContentItem], users: UserStore) -> list[BlogPostResponse]:
    authors = AuthorDirectory(users)
    return [post_response(i, authors) for i in items]


def thread_responses(items: Iterable[ContentItem], users: UserStore) -> list[ForumThreadResponse]:
    authors = AuthorDirectory(users)
    return [thread_response(i, authors) for i in items]


def contact_response(m: ContactMessage) -> ContactResponse:
    return ContactResponse(
        id=m.id,
        name=m.name,
        email=m.email,
        subject=m.subject,
        message=m.message,
        ip_address=m.ip_address,
        user_agent=m.user_agent,
        status=m.status.value,
        replied=m.replied,
        reply_message=m.reply_message,
        replied_at=m.replied_at,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )
