"""Seed the stores with sample users, blog posts and forum threads.

Seed files are YAML::

    users:
      - username: react_dev_alex
        email: alex.frontend@example.org
        password: Password123!
    posts:
      - author: react_dev_alex
        title: Mastering Next.js
        content: ...
        tags: [Next.js, React]
        image: https://images.example.org/next.png
    threads:
      - author: react_dev_alex
        title: Should I migrate to Vite?
        content: ...
        category: react

Applying a seed twice is harmless: users are matched by username and
items by (author, title).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from devhub.services import Services

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    users_created: int = 0
    users_existing: int = 0
    posts_created: int = 0
    threads_created: int = 0
    skipped: int = 0


def load_seed(path: str | Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a mapping")
    return data


def apply_seed(services: Services, data: dict[str, Any]) -> SeedReport:
    """Create whatever in ``data`` is not there yet."""
    report = SeedReport()
    authors: dict[str, str] = {}

    for entry in data.get("users", []) or []:
        existing = services.users.get_user_by_username(entry["username"])
        if existing is not None:
            report.users_existing += 1
            authors[existing.username] = existing.id
            continue
        user = services.users.create(entry["username"], entry["email"], entry["password"])
        authors[user.username] = user.id
        report.users_created += 1

    def _author_id(username: str) -> str | None:
        if username not in authors:
            user = services.users.get_user_by_username(username)
            if user is None:
                return None
            authors[username] = user.id
        return authors[username]

    for entry in data.get("posts", []) or []:
        author_id = _author_id(entry.get("author", ""))
        if author_id is None:
            logger.warning("Skipping post %r: unknown author %r", entry.get("title"), entry.get("author"))
            report.skipped += 1
            continue
        if services.posts.has_title(author_id, entry["title"]):
            report.skipped += 1
            continue
        services.posts.create(
            author_id,
            entry["title"],
            entry["content"],
            image_url=entry.get("image"),
            tags=entry.get("tags") or [],
            is_published=entry.get("published", True),
        )
        report.posts_created += 1

    for entry in data.get("threads", []) or []:
        author_id = _author_id(entry.get("author", ""))
        if author_id is None:
            logger.warning("Skipping thread %r: unknown author %r", entry.get("title"), entry.get("author"))
            report.skipped += 1
            continue
        if services.threads.has_title(author_id, entry["title"]):
            report.skipped += 1
            continue
        services.threads.create(
            author_id,
            entry["title"],
            entry["content"],
            category=entry.get("category"),
        )
        report.threads_created += 1

    return report
