"""Document storage: JSON-file collections with a DB-ready interface."""

from devhub.storage.collection import Collection

__all__ = ["Collection"]
