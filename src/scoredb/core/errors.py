"""
Error types raised by ScoreDB.

Only argument and size problems are errors. Records that cannot be parsed
and lookups that match nothing are reported with sentinels (None, False,
0, []) by the storage layer instead.
"""


class ScoreDBError(Exception):
    """Base class for ScoreDB errors."""


class InvalidArgumentError(ScoreDBError, ValueError):
    """Raised when a collection name, id, query or document is malformed."""


class SizeLimitExceededError(ScoreDBError, ValueError):
    """Raised when a serialized document is larger than the host allows."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Data size ({size} chars) exceeds the maximum entry length of {limit} characters. "
            "Consider splitting the data."
        )


class CollectionCreationError(ScoreDBError):
    """Raised when the backing store fails to create a collection."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        super().__init__(f"Failed to create collection '{collection}'. {reason}")


class SchemaNotFoundError(ScoreDBError, KeyError):
    """Raised when resolving a schema that was never defined."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        super().__init__(
            f"Schema '{schema_name}' not found. Make sure to register it using define() on startup."
        )

    def __str__(self) -> str:
        return self.args[0]
