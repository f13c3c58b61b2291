"""
Data Schema - defaults and generators applied before a document is saved.

A schema maps field names to a default value or to a zero-argument
callable producing one (an id generator, a timestamp). resolve() fills in
whatever the caller left out. The storage engine never calls this itself.
"""

import time
from collections.abc import Mapping
from typing import Any

from scoredb.core.config import settings, get_logger
from scoredb.core.errors import InvalidArgumentError, SchemaNotFoundError
from scoredb.storage.backend import validate_collection_name
from scoredb.storage.engine import ScoreboardStorage

logger = get_logger("storage.schema")


class DataSchema:
    """
    Schema registry.

    Definitions (callables included) live in RAM; a metadata record with the
    field names of each schema is also written to a dedicated collection so
    other tools can see which schemas exist.
    """

    def __init__(self, storage: ScoreboardStorage, collection: str | None = None):
        self.storage = storage
        self.collection = validate_collection_name(
            collection or settings.schema_collection, storage.max_name_length
        )
        self._schemas: dict[str, dict[str, Any]] = {}

    # =========================
    # Definition
    # =========================

    def define(self, name: str, definition: Mapping[str, Any]) -> None:
        """Register a schema and record its metadata if it isn't recorded yet."""
        if not isinstance(name, str) or name.strip() == "":
            raise InvalidArgumentError("Schema name must be a valid string.")
        if not isinstance(definition, Mapping):
            raise InvalidArgumentError("Schema definition must be a mapping.")

        self._schemas[name] = dict(definition)

        # Only the keys: callables can't be serialized
        metadata = {
            "name": name,
            "fields": list(definition.keys()),
            "registeredAt": int(time.time() * 1000),
        }
        if not self.storage.exists(self.collection, {"name": name}):
            self.storage.save(self.collection, metadata)
            logger.debug(f"Recorded schema '{name}' in {self.collection}")

    def names(self) -> list[str]:
        return list(self._schemas)

    # =========================
    # Resolution
    # =========================

    def resolve(self, name: str, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Return a copy of data with every missing or None field filled in.

        Raises:
            SchemaNotFoundError: the schema was never defined
        """
        schema = self._schemas.get(name)
        if schema is None:
            raise SchemaNotFoundError(name)

        resolved = dict(data or {})
        for key, default in schema.items():
            if resolved.get(key) is None:
                resolved[key] = default() if callable(default) else default
        return resolved

    # =========================
    # Cleanup
    # =========================

    def reset(self, clear_storage: bool = True) -> None:
        """Forget every schema and, unless told otherwise, clear the metadata collection."""
        self._schemas.clear()
        if clear_storage:
            self.storage.clear(self.collection)
