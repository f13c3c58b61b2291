"""
StoreContext - the services one process works with.

Instead of module-level registries, a context is built once (at startup)
and handed to whatever needs storage, cache, relations or schemas. reset()
clears the in-memory state kept by those services so a reload starts clean.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scoredb.core.config import settings, get_logger
from scoredb.storage.backend import BackingStore, MemoryBackingStore, SqliteBackingStore
from scoredb.storage.cache import CacheManager
from scoredb.storage.engine import ScoreboardStorage
from scoredb.storage.relation import Relation
from scoredb.storage.schema import DataSchema

logger = get_logger("context")


@dataclass
class StoreContext:
    """
    Shared services of a ScoreDB process.

    - storage: direct access to the backing store (source of truth)
    - cache: RAM mirror; use it as the only write path of cached collections
    - relation: binding registry reading through the cache
    - schema: defaults applied by application code before saving
    """

    backend: BackingStore
    storage: ScoreboardStorage
    cache: CacheManager
    relation: Relation
    schema: DataSchema

    created_at: float = field(default=0.0)
    """Unix time the context was built at."""

    def reset(self) -> None:
        """Clear bindings, cache mirrors and in-memory schemas. Stored data is kept."""
        self.relation.reset()
        self.cache.invalidate()
        self.schema.reset(clear_storage=False)
        logger.info("Context reset")

    def to_dict(self) -> dict[str, Any]:
        """Summary of the context, for status output."""
        return {
            "backend": type(self.backend).__name__,
            "collections": self.backend.list_collections(),
            "max_name_length": self.storage.max_name_length,
            "max_entry_length": self.storage.max_entry_length,
            "schemas": self.schema.names(),
        }


def create_backend(kind: str | None = None, db_path: Path | None = None) -> BackingStore:
    """Build the backing store named by kind (defaults to settings.backend)."""
    kind = kind or settings.backend
    if kind == "memory":
        return MemoryBackingStore()
    if kind == "sqlite":
        if db_path is None:
            settings.ensure_directories()
        return SqliteBackingStore(db_path)
    raise ValueError(f"Unknown backend: {kind}")


def create_context(
    backend: BackingStore | None = None,
    max_name_length: int | None = None,
    max_entry_length: int | None = None,
    schema_collection: str | None = None,
) -> StoreContext:
    """Factory function to create a new StoreContext."""
    if backend is None:
        backend = create_backend()
    storage = ScoreboardStorage(
        backend,
        max_name_length=max_name_length,
        max_entry_length=max_entry_length,
    )
    cache = CacheManager(storage)
    return StoreContext(
        backend=backend,
        storage=storage,
        cache=cache,
        relation=Relation(cache),
        schema=DataSchema(storage, schema_collection),
        created_at=time.time(),
    )
