"""Pydantic models for API request validation and response serialization.

Request models are the input-validation gate in front of every operation;
FastAPI rejects malformed bodies before a store is touched. Response models
mirror the devhub dataclasses and serialize with camelCase keys.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from devhub.auth.passwords import password_problems
from devhub.contact.models import ContactStatus


class APIModel(BaseModel):
    """Base for every wire model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrimmedModel(APIModel):
    """Request body whose string fields are stripped before validation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


_HTTP_URL = TypeAdapter(HttpUrl)


def _checked_url(value: Optional[str]) -> Optional[str]:
    """Validate ``value`` as an http(s) URL but keep the text as sent."""
    if value is None:
        return None
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        raise ValueError("Must be a valid http(s) URL") from None
    return value


# ---------------------------------------------------------------------------
# Auth models
# ---------------------------------------------------------------------------


class RegisterRequest(APIModel):
    username: str = Field(
        ...,
        min_length=3,
        max_length=30,
        pattern=r"^[a-zA-Z0-9_]+$",
        description="Letters, numbers and underscores",
    )
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class LoginRequest(APIModel):
    identifier: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

    @field_validator("identifier", mode="before")
    @classmethod
    def _strip_identifier(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class UserResponse(APIModel):
    """The signed-in user's own account view."""

    id: str
    username: str
    email: str
    avatar: str = ""
    bio: str = ""
    role: str = "member"
    last_login: str = ""
    created_at: str = ""


class AuthResponse(APIModel):
    message: str
    token: str
    user: UserResponse


class ProfileEnvelope(APIModel):
    message: str = ""
    user: UserResponse


class VerifiedUser(APIModel):
    id: str
    username: str
    email: str


class VerifyResponse(APIModel):
    valid: bool = True
    user: VerifiedUser


class MessageResponse(APIModel):
    message: str


# ---------------------------------------------------------------------------
# User models
# ---------------------------------------------------------------------------


class ProfileUpdateRequest(TrimmedModel):
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None

    @field_validator("avatar", mode="before")
    @classmethod
    def _blank_avatar(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("avatar")
    @classmethod
    def _avatar_url(cls, v: Optional[str]) -> Optional[str]:
        return _checked_url(v)


class PasswordChangeRequest(APIModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        problems = password_problems(v)
        if problems:
            raise ValueError(problems[0])
        return v


class UserStats(APIModel):
    blog_posts: int = 0
    forum_threads: int = 0
    comments: int = 0


class PublicUserResponse(APIModel):
    """Another user's profile: no email, plus activity counts."""

    id: str
    username: str
    avatar: str = ""
    bio: str = ""
    created_at: str = ""
    stats: UserStats = Field(default_factory=UserStats)


class PublicUserEnvelope(APIModel):
    user: PublicUserResponse


# ---------------------------------------------------------------------------
# Content models
# ---------------------------------------------------------------------------


class AuthorSummary(APIModel):
    """Display fields of an author, resolved at read time."""

    id: str
    username: str = ""
    avatar: str = ""


class EngagementResponse(APIModel):
    id: str
    author: AuthorSummary
    text: str
    created_at: str = ""


class BlogPostRequest(TrimmedModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    image: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_published: Optional[bool] = None

    @field_validator("image", mode="before")
    @classmethod
    def _blank_image(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("image")
    @classmethod
    def _image_url(cls, v: Optional[str]) -> Optional[str]:
        return _checked_url(v)

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: list[str]) -> list[str]:
        return [t for t in v if t]


class BlogPostResponse(APIModel):
    id: str
    title: str
    content: str
    author: AuthorSummary
    image: str = ""
    tags: list[str] = Field(default_factory=list)
    is_published: bool = True
    views: int = 0
    comments: list[EngagementResponse] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


class BlogPostEnvelope(APIModel):
    message: str = ""
    post: BlogPostResponse


class BlogPostListResponse(APIModel):
    posts: list[BlogPostResponse] = Field(default_factory=list)
    pagination: dict[str, Any] = Field(default_factory=dict)


class CommentRequest(TrimmedModel):
    text: str = Field(..., min_length=1, max_length=1000)


class CommentEnvelope(APIModel):
    message: str
    comment: EngagementResponse


class ForumThreadRequest(TrimmedModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=50)

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, v: Any) -> Any:
        return _blank_to_none(v)


class ForumThreadResponse(APIModel):
    id: str
    title: str
    content: str
    author: AuthorSummary
    category: str = "General"
    is_pinned: bool = False
    is_locked: bool = False
    views: int = 0
    replies: list[EngagementResponse] = Field(default_factory=list)
    last_activity: str = ""
    created_at: str = ""
    updated_at: str = ""


class ForumThreadEnvelope(APIModel):
    message: str = ""
    thread: ForumThreadResponse


class ForumThreadListResponse(APIModel):
    threads: list[ForumThreadResponse] = Field(default_factory=list)
    pagination: dict[str, Any] = Field(default_factory=dict)


class ReplyRequest(TrimmedModel):
    text: str = Field(..., min_length=1, max_length=2000)


class ReplyEnvelope(APIModel):
    message: str
    reply: EngagementResponse


class ModerationRequest(APIModel):
    is_pinned: Optional[bool] = None
    is_locked: Optional[bool] = None


class CategoriesResponse(APIModel):
    categories: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Contact models
# ---------------------------------------------------------------------------


class ContactRequest(TrimmedModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)


class ContactReceipt(APIModel):
    """What the public submitter gets back."""

    id: str
    name: str
    email: str
    subject: str
    created_at: str = ""


class ContactReceiptEnvelope(APIModel):
    message: str
    contact: ContactReceipt


class ContactResponse(APIModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    ip_address: str = ""
    user_agent: str = ""
    status: str = "pending"
    replied: bool = False
    reply_message: str = ""
    replied_at: str = ""
    created_at: str = ""
    updated_at: str = ""


class ContactEnvelope(APIModel):
    message: str = ""
    contact: ContactResponse


class ContactListResponse(APIModel):
    contacts: list[ContactResponse] = Field(default_factory=list)
    pagination: dict[str, Any] = Field(default_factory=dict)


class ContactReplyRequest(TrimmedModel):
    reply_message: str = Field(..., min_length=10, max_length=2000)


class ContactStatusRequest(APIModel):
    status: ContactStatus


class ContactStatsResponse(APIModel):
    total: int = 0
    pending: int = 0
    read: int = 0
    replied: int = 0
    recent_week: int = 0
