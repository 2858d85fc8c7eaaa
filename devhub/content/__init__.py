"""Content store: ownership-checked CRUD over blog posts and forum threads.

Both content types share one engine (:class:`ContentStore`) parameterised by
a :class:`ContentKind` descriptor:
- Blog posts: publication flag, image and tags; comments up to 1000 chars
- Forum threads: category, pin and lock flags, last-activity tracking;
  replies up to 2000 chars
"""

from devhub.content.models import BLOG_POST, FORUM_THREAD, ContentItem, ContentKind, Engagement
from devhub.content.store import ContentStore

__all__ = [
    "BLOG_POST",
    "FORUM_THREAD",
    "ContentItem",
    "ContentKind",
    "ContentStore",
    "Engagement",
]
