"""
Storage Layer - Backing store, engine, cache, relations, schemas.

The storage hierarchy:
1. Backing store → (content, id) entries per collection (source of truth)
2. ScoreboardStorage → documents, ids and queries on top of the entries
3. CacheManager → RAM mirror of whole collections (write-through)
4. Relation → hydration of related documents across collections

Writes of a cached collection should all go through its CacheManager.
"""

from scoredb.storage.backend import BackingStore, MemoryBackingStore, SqliteBackingStore
from scoredb.storage.engine import ScoreboardStorage
from scoredb.storage.cache import CacheManager
from scoredb.storage.relation import Relation
from scoredb.storage.schema import DataSchema

__all__ = [
    "BackingStore",
    "MemoryBackingStore",
    "SqliteBackingStore",
    "ScoreboardStorage",
    "CacheManager",
    "Relation",
    "DataSchema",
]
