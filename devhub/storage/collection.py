"""File-based JSON document collection.

Each collection is one JSON file holding a list of dicts keyed by ``id``.
Every read-modify-write runs under a per-collection lock, so a single
document update is atomic within the process; there is no cross-request
versioning (last writer wins).
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from devhub.errors import Internal

logger = logging.getLogger(__name__)

Predicate = Callable[[dict], bool]


class Collection:
    """A list of JSON documents persisted to ``<base_dir>/<name>.json``."""

    def __init__(self, base_dir: Path, name: str) -> None:
        self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self.name = name
        self._path = self._base / f"{name}.json"
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self) -> list[dict]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Unreadable collection file %s: %s", self._path, exc)
            raise Internal("Storage unavailable") from exc
        return data if isinstance(data, list) else []

    def _write_json(self, docs: list[dict]) -> None:
        tmp = self._path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(docs, indent=2, default=str), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            logger.error("Failed writing collection file %s: %s", self._path, exc)
            raise Internal("Storage unavailable") from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, predicate: Optional[Predicate] = None) -> list[dict]:
        """Return all documents matching ``predicate`` in insertion order."""
        with self.lock:
            docs = self._read_json()
        if predicate is None:
            return docs
        return [d for d in docs if predicate(d)]

    def find_one(self, predicate: Predicate) -> Optional[dict]:
        for d in self.find():
            if predicate(d):
                return d
        return None

    def get(self, doc_id: str) -> Optional[dict]:
        return self.find_one(lambda d: d.get("id") == doc_id)

    def count(self, predicate: Optional[Predicate] = None) -> int:
        return len(self.find(predicate))

    def distinct(self, key: str) -> list:
        """Sorted distinct non-empty values of ``key``."""
        values = {d.get(key) for d in self.find() if d.get(key)}
        return sorted(values)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, doc: dict) -> dict:
        with self.lock:
            docs = self._read_json()
            docs.append(doc)
            self._write_json(docs)
        return doc

    def update(self, doc_id: str, mutate: Callable[[dict], None]) -> Optional[dict]:
        """Apply ``mutate`` to the stored document in place and persist it.

        Returns the updated document, or None if ``doc_id`` does not exist.
        Exceptions raised by ``mutate`` abort the write.
        """
        with self.lock:
            docs = self._read_json()
            for d in docs:
                if d.get("id") == doc_id:
                    mutate(d)
                    self._write_json(docs)
                    return d
        return None

    def delete(self, doc_id: str) -> bool:
        return self.delete_where(lambda d: d.get("id") == doc_id) > 0

    def delete_where(self, predicate: Predicate) -> int:
        with self.lock:
            docs = self._read_json()
            kept = [d for d in docs if not predicate(d)]
            removed = len(docs) - len(kept)
            if removed:
                self._write_json(kept)
        return removed
