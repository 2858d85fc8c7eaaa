"""Page-parameter coercion and paginated results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


def _positive_int(raw: Any, default: int) -> int:
    """Parse ``raw`` as a positive int, falling back to ``default``."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and page size."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def parse(
        cls,
        page: Any = None,
        limit: Any = None,
        default_size: int = DEFAULT_PAGE_SIZE,
    ) -> "PageRequest":
        """Build a request from raw query values.

        Absent, non-numeric or non-positive values fall back to page 1 and
        ``default_size``. No upper bound is applied to the page size.
        """
        return cls(
            page=_positive_int(page, 1),
            page_size=_positive_int(limit, default_size),
        )


@dataclass
class Page(Generic[T]):
    """One slice of a sorted result set plus the totals needed to navigate it."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self, resource: str) -> dict[str, Any]:
        """Return the wire ``pagination`` object, e.g. ``totalPosts`` for ``resource="Posts"``."""
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            f"total{resource}": self.total,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def paginate(items: list[T], request: PageRequest) -> Page[T]:
    """Slice an already-sorted list according to ``request``."""
    window = items[request.skip : request.skip + request.page_size]
    return Page(items=window, page=request.page, page_size=request.page_size, total=len(items))
