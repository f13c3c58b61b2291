"""
ScoreDB

A small document store over a scoreboard-style key/value primitive, with a
write-through RAM cache and foreign-key style relation hydration.
"""

__version__ = "1.0.0"
__author__ = "ScoreDB Team"

from scoredb.core.config import settings
from scoredb.core.errors import InvalidArgumentError, ScoreDBError, SizeLimitExceededError
from scoredb.core.format import DataFormat
from scoredb.core.types import Equality, Predicate, Record
from scoredb.context import StoreContext, create_context
from scoredb.storage import (
    CacheManager,
    DataSchema,
    MemoryBackingStore,
    Relation,
    ScoreboardStorage,
    SqliteBackingStore,
)

__all__ = [
    "settings",
    "InvalidArgumentError",
    "ScoreDBError",
    "SizeLimitExceededError",
    "DataFormat",
    "Equality",
    "Predicate",
    "Record",
    "StoreContext",
    "create_context",
    "CacheManager",
    "DataSchema",
    "MemoryBackingStore",
    "Relation",
    "ScoreboardStorage",
    "SqliteBackingStore",
]
