"""Generic ownership-checked CRUD with embedded engagement collections.

One :class:`ContentStore` per content type, persisted as a JSON collection
under ``<data_dir>/content/``. Each item is stored as a single document with
its engagements embedded, so appending or removing a comment/reply is one
atomic document write.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Callable, Optional

from devhub.content.models import (
    CATEGORY_MAX_LENGTH,
    DEFAULT_CATEGORY,
    TITLE_MAX_LENGTH,
    ContentItem,
    ContentKind,
    Engagement,
    utcnow_iso,
)
from devhub.errors import Forbidden, NotFound, ValidationFailed
from devhub.pagination import Page, PageRequest, paginate
from devhub.storage import Collection

logger = logging.getLogger(__name__)

NotifySink = Callable[[str, dict], None]


class ContentStore:
    """CRUD, pagination and nested engagements for one :class:`ContentKind`."""

    def __init__(self, kind: ContentKind, base_dir: Path, notify: Optional[NotifySink] = None) -> None:
        self.kind = kind
        self._items = Collection(Path(base_dir), kind.collection)
        self._notify = notify

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _engagement_from_dict(d: dict) -> Engagement:
        return Engagement(
            id=d["id"],
            author_id=d["author_id"],
            text=d.get("text", ""),
            created_at=d.get("created_at", ""),
        )

    @staticmethod
    def _engagement_to_dict(e: Engagement) -> dict:
        return {
            "id": e.id,
            "author_id": e.author_id,
            "text": e.text,
            "created_at": e.created_at,
        }

    def _item_from_dict(self, d: dict) -> ContentItem:
        return ContentItem(
            id=d["id"],
            kind=d.get("kind", self.kind.name),
            title=d["title"],
            body=d["body"],
            author_id=d["author_id"],
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
            views=d.get("views", 0),
            engagements=[self._engagement_from_dict(e) for e in d.get("engagements", [])],
            image_url=d.get("image_url", ""),
            tags=list(d.get("tags", [])),
            is_published=d.get("is_published", True),
            category=d.get("category", ""),
            is_pinned=d.get("is_pinned", False),
            is_locked=d.get("is_locked", False),
            last_activity=d.get("last_activity", ""),
        )

    def _item_to_dict(self, item: ContentItem) -> dict:
        d = {
            "id": item.id,
            "kind": item.kind,
            "title": item.title,
            "body": item.body,
            "author_id": item.author_id,
            "created_at": item.created_at,
            "updated_at": item.updated_at,
            "views": item.views,
            "engagements": [self._engagement_to_dict(e) for e in item.engagements],
        }
        if self.kind.supports_media:
            d["image_url"] = item.image_url
            d["tags"] = list(item.tags)
        if self.kind.requires_published:
            d["is_published"] = item.is_published
        if self.kind.supports_category:
            d["category"] = item.category
        if self.kind.supports_locking:
            d["is_pinned"] = item.is_pinned
            d["is_locked"] = item.is_locked
            d["last_activity"] = item.last_activity
        return d

    def _is_visible(self, d: dict) -> bool:
        return not self.kind.requires_published or d.get("is_published", True)

    def _not_found(self) -> NotFound:
        return NotFound(f"{self.kind.label} not found")

    def _check_fields(self, title: str, body: str, category: Optional[str]) -> None:
        errors = []
        if not title or len(title) > TITLE_MAX_LENGTH:
            errors.append({
                "field": "title",
                "message": f"Title is required and must not exceed {TITLE_MAX_LENGTH} characters",
            })
        if not body:
            errors.append({"field": "content", "message": "Content is required"})
        if category is not None and len(category) > CATEGORY_MAX_LENGTH:
            errors.append({
                "field": "category",
                "message": f"Category must not exceed {CATEGORY_MAX_LENGTH} characters",
            })
        if errors:
            raise ValidationFailed(errors)

    def _check_owner(self, d: dict, caller_id: str, action: str) -> None:
        if d["author_id"] != caller_id:
            raise Forbidden(f"Not authorized to {action} this {self.kind.name}")

    def _check_unlocked(self, d: dict, reason: str) -> None:
        if self.kind.supports_locking and d.get("is_locked", False):
            raise Forbidden(f"Thread is locked and {reason}")

    def _touch_activity(self, d: dict, now: str) -> None:
        if self.kind.supports_locking:
            d["last_activity"] = now

    def _sort_key(self, d: dict):
        if self.kind.supports_locking:
            return (d.get("is_pinned", False), d.get("last_activity", ""))
        return d.get("created_at", "")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, page: PageRequest, category: Optional[str] = None) -> Page[ContentItem]:
        """List publicly visible items in the type's default order.

        Forum threads: pinned first, then most recent activity. Blog posts:
        newest first. ``category`` (threads only) filters by equality; the
        value ``"all"`` means no filter.
        """
        def _match(d: dict) -> bool:
            if not self._is_visible(d):
                return False
            if self.kind.supports_category and category and category != "all":
                return d.get("category") == category
            return True

        docs = sorted(self._items.find(_match), key=self._sort_key, reverse=True)
        result = paginate(docs, page)
        return Page(
            items=[self._item_from_dict(d) for d in result.items],
            page=result.page,
            page_size=result.page_size,
            total=result.total,
        )

    def list_by_author(self, author_id: str, page: PageRequest) -> Page[ContentItem]:
        """Visible items authored by ``author_id``, newest first."""
        docs = self._items.find(lambda d: d["author_id"] == author_id and self._is_visible(d))
        docs.sort(key=lambda d: d.get("created_at", ""), reverse=True)
        result = paginate(docs, page)
        return Page(
            items=[self._item_from_dict(d) for d in result.items],
            page=result.page,
            page_size=result.page_size,
            total=result.total,
        )

    def get(self, item_id: str) -> Optional[ContentItem]:
        """Raw lookup: no visibility rule, no view counting."""
        d = self._items.get(item_id)
        return self._item_from_dict(d) if d else None

    def get_one(self, item_id: str) -> ContentItem:
        """Fetch a visible item and count the view.

        Every successful call increments ``views`` by one, including repeat
        fetches by the same caller.
        """
        def _count_view(d: dict) -> None:
            if not self._is_visible(d):
                raise self._not_found()
            d["views"] = d.get("views", 0) + 1

        d = self._items.update(item_id, _count_view)
        if d is None:
            raise self._not_found()
        return self._item_from_dict(d)

    def categories(self) -> list[str]:
        """Distinct category labels in use (threads only)."""
        if not self.kind.supports_category:
            return []
        return self._items.distinct("category")

    def has_title(self, author_id: str, title: str) -> bool:
        """True if ``author_id`` already owns an item titled ``title`` (published or not)."""
        return self._items.find_one(lambda d: d["author_id"] == author_id and d["title"] == title) is not None

    def count_by_author(self, author_id: str) -> int:
        return self._items.count(lambda d: d["author_id"] == author_id and self._is_visible(d))

    def count_engagements_by_author(self, author_id: str) -> int:
        return sum(
            1
            for d in self._items.find()
            for e in d.get("engagements", [])
            if e.get("author_id") == author_id
        )

    # ------------------------------------------------------------------
    # Item CRUD
    # ------------------------------------------------------------------

    def create(
        self,
        author_id: str,
        title: str,
        body: str,
        *,
        image_url: Optional[str] = None,
        tags: Optional[list[str]] = None,
        category: Optional[str] = None,
        is_published: bool = True,
    ) -> ContentItem:
        """Create an item owned by ``author_id``."""
        title, body = title.strip(), body.strip()
        category = category.strip() if category else None
        self._check_fields(title, body, category)

        now = utcnow_iso()
        item = ContentItem(
            id=uuid.uuid4().hex,
            kind=self.kind.name,
            title=title,
            body=body,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        if self.kind.supports_media:
            item.image_url = image_url or ""
            item.tags = list(tags or [])
        if self.kind.requires_published:
            item.is_published = is_published
        if self.kind.supports_category:
            item.category = category or DEFAULT_CATEGORY
        if self.kind.supports_locking:
            item.last_activity = now

        self._items.insert(self._item_to_dict(item))
        logger.info("Created %s %s by %s", self.kind.name, item.id, author_id)
        return item

    def update(
        self,
        item_id: str,
        caller_id: str,
        title: str,
        body: str,
        *,
        image_url: Optional[str] = None,
        tags: Optional[list[str]] = None,
        category: Optional[str] = None,
        is_published: Optional[bool] = None,
    ) -> ContentItem:
        """Replace the editable fields. Only the author may edit; locked threads are frozen.

        ``is_published`` (blog posts only) publishes or unpublishes the item;
        None leaves the flag as it is.
        """
        title, body = title.strip(), body.strip()
        category = category.strip() if category else None
        self._check_fields(title, body, category)

        def _apply(d: dict) -> None:
            self._check_owner(d, caller_id, "update")
            self._check_unlocked(d, "cannot be edited")
            now = utcnow_iso()
            d["title"] = title
            d["body"] = body
            d["updated_at"] = now
            if self.kind.supports_media:
                d["image_url"] = image_url or ""
                d["tags"] = list(tags or [])
            if self.kind.requires_published and is_published is not None:
                d["is_published"] = is_published
            if self.kind.supports_category:
                d["category"] = category or d.get("category") or DEFAULT_CATEGORY
            self._touch_activity(d, now)

        d = self._items.update(item_id, _apply)
        if d is None:
            raise self._not_found()
        return self._item_from_dict(d)

    def delete(self, item_id: str, caller_id: str) -> None:
        """Permanently remove an item and its engagements. Author only; locked threads are frozen."""
        with self._items.lock:
            d = self._items.get(item_id)
            if d is None:
                raise self._not_found()
            self._check_owner(d, caller_id, "delete")
            self._check_unlocked(d, "cannot be deleted")
            self._items.delete(item_id)
        logger.info("Deleted %s %s by %s", self.kind.name, item_id, caller_id)

    def set_moderation(
        self,
        item_id: str,
        is_pinned: Optional[bool] = None,
        is_locked: Optional[bool] = None,
    ) -> ContentItem:
        """Pin/lock flags. Callers enforce the admin requirement."""
        if not self.kind.supports_locking:
            raise ValidationFailed.for_field("isLocked", f"{self.kind.label}s cannot be pinned or locked")

        def _apply(d: dict) -> None:
            if is_pinned is not None:
                d["is_pinned"] = is_pinned
            if is_locked is not None:
                d["is_locked"] = is_locked

        d = self._items.update(item_id, _apply)
        if d is None:
            raise self._not_found()
        return self._item_from_dict(d)

    # ------------------------------------------------------------------
    # Engagements
    # ------------------------------------------------------------------

    def add_engagement(self, item_id: str, author_id: str, text: str) -> Engagement:
        """Append a comment/reply and return it."""
        text = text.strip()
        limit = self.kind.engagement_max_length
        if not text or len(text) > limit:
            raise ValidationFailed.for_field(
                "text",
                f"{self.kind.engagement_label} text is required and must not exceed {limit} characters",
            )

        engagement = Engagement(id=uuid.uuid4().hex, author_id=author_id, text=text)

        def _append(d: dict) -> None:
            if not self._is_visible(d):
                raise self._not_found()
            self._check_unlocked(d, "cannot accept new replies")
            d.setdefault("engagements", []).append(self._engagement_to_dict(engagement))
            self._touch_activity(d, engagement.created_at)

        d = self._items.update(item_id, _append)
        if d is None:
            raise self._not_found()

        if self._notify is not None:
            self._notify(f"{self.kind.engagement}.added", {
                "kind": self.kind.name,
                "item_id": d["id"],
                "item_title": d["title"],
                "item_author_id": d["author_id"],
                "engagement_id": engagement.id,
                "author_id": author_id,
                "text": text,
            })
        return engagement

    def remove_engagement(self, item_id: str, engagement_id: str, caller_id: str) -> None:
        """Remove a comment/reply. Allowed for its author or the parent's author."""
        def _remove(d: dict) -> None:
            engagements = d.get("engagements", [])
            for idx, e in enumerate(engagements):
                if e["id"] == engagement_id:
                    break
            else:
                raise NotFound(f"{self.kind.engagement_label} not found")
            if caller_id not in (e["author_id"], d["author_id"]):
                raise Forbidden(f"Not authorized to delete this {self.kind.engagement}")
            del engagements[idx]
            self._touch_activity(d, utcnow_iso())

        d = self._items.update(item_id, _remove)
        if d is None:
            raise self._not_found()
