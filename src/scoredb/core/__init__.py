"""
Core module - Configuration, errors, types and value formatting.
"""

from scoredb.core.config import settings
from scoredb.core.errors import (
    CollectionCreationError,
    InvalidArgumentError,
    SchemaNotFoundError,
    ScoreDBError,
    SizeLimitExceededError,
)
from scoredb.core.format import DataFormat
from scoredb.core.types import Binding, Equality, Predicate, Query, Record

__all__ = [
    "settings",
    "CollectionCreationError",
    "InvalidArgumentError",
    "SchemaNotFoundError",
    "ScoreDBError",
    "SizeLimitExceededError",
    "DataFormat",
    "Binding",
    "Equality",
    "Predicate",
    "Query",
    "Record",
]
