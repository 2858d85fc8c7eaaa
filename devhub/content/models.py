"""Content domain models: the per-type descriptor, items and engagements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_CATEGORY = "General"
TITLE_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 50


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ContentKind:
    """Capabilities and limits of one content type."""

    name: str                       # "post" | "thread"
    label: str                      # human label used in error messages
    collection: str                 # storage collection name
    engagement: str                 # "comment" | "reply"
    engagement_max_length: int
    requires_published: bool = False
    supports_locking: bool = False
    supports_category: bool = False
    supports_media: bool = False    # image URL + tags

    @property
    def engagement_label(self) -> str:
        return self.engagement.capitalize()


BLOG_POST = ContentKind(
    name="post",
    label="Blog post",
    collection="blog_posts",
    engagement="comment",
    engagement_max_length=1000,
    requires_published=True,
    supports_media=True,
)

FORUM_THREAD = ContentKind(
    name="thread",
    label="Forum thread",
    collection="forum_threads",
    engagement="reply",
    engagement_max_length=2000,
    supports_locking=True,
    supports_category=True,
)


@dataclass
class Engagement:
    """A comment or reply embedded in its parent item."""

    id: str
    author_id: str
    text: str
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()


@dataclass
class ContentItem:
    """A blog post or forum thread with its ordered engagements."""

    id: str
    kind: str
    title: str
    body: str
    author_id: str
    created_at: str = ""
    updated_at: str = ""
    views: int = 0
    engagements: list[Engagement] = field(default_factory=list)

    # Blog post
    image_url: str = ""
    tags: list[str] = field(default_factory=list)
    is_published: bool = True

    # Forum thread
    category: str = ""
    is_pinned: bool = False
    is_locked: bool = False
    last_activity: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utcnow_iso()
        if not self.updated_at:
            self.updated_at = self.created_at
