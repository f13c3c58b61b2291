"""
Cache Manager - RAM mirror of collections.

Each collection is read from the storage engine once, on first touch, and
then served from memory. Writes go to storage first and are mirrored only
after the physical write succeeded.

The mirror knows nothing about writes that bypass it. Route every write of
a cached collection through the same CacheManager, or call invalidate()
after writing through the engine directly.
"""

import copy
from typing import Any

from scoredb.core.config import get_logger
from scoredb.core.types import Record
from scoredb.storage.codec import decode_document, dumps_compact, encode_document
from scoredb.storage.engine import ScoreboardStorage, validate_record_id

logger = get_logger("storage.cache")


class CacheManager:
    """Write-through RAM cache in front of a ScoreboardStorage."""

    def __init__(self, storage: ScoreboardStorage):
        self.storage = storage
        self._memory: dict[str, dict[int, Any]] = {}

    # =========================
    # Internal sync
    # =========================

    def ensure_loaded(self, collection: str) -> dict[int, Any]:
        """Load the collection into RAM unless it is already there."""
        mirror = self._memory.get(collection)
        if mirror is not None:
            return mirror

        mirror = {record.id: record.data for record in self.storage.get_elements(collection)}
        self._memory[collection] = mirror
        logger.debug(f"Loaded {len(mirror)} records of {collection} into cache")
        return mirror

    def is_loaded(self, collection: str) -> bool:
        return collection in self._memory

    def invalidate(self, collection: str | None = None) -> None:
        """Drop the mirror of one collection, or of all of them."""
        if collection is None:
            self._memory.clear()
        else:
            self._memory.pop(collection, None)

    # =========================
    # Read (RAM)
    # =========================

    def get_by_id(self, collection: str, record_id: int) -> Any | None:
        validate_record_id(record_id)
        data = self.ensure_loaded(collection).get(record_id)
        return copy.deepcopy(data)

    def get_all(self, collection: str) -> list[Record]:
        mirror = self.ensure_loaded(collection)
        return [Record(id=record_id, data=copy.deepcopy(data)) for record_id, data in mirror.items()]

    def get_elements(self, collection: str) -> list[Record]:
        """Alias of get_all, so the cache can serve as a relation reader."""
        return self.get_all(collection)

    # =========================
    # Write (storage, then RAM)
    # =========================

    def _drop_duplicates(self, mirror: dict[int, Any], content: str, keep_id: int) -> None:
        # The backing store keys entries by content, so writing content that is
        # already stored moves that entry instead of adding a second one
        for record_id, existing in list(mirror.items()):
            if record_id != keep_id and dumps_compact(existing) == content:
                del mirror[record_id]

    def save(self, collection: str, data: Any) -> int:
        mirror = self.ensure_loaded(collection)
        content = encode_document(data, self.storage.max_entry_length)

        new_id = self.storage.save(collection, data)

        self._drop_duplicates(mirror, content, new_id)
        mirror[new_id] = decode_document(content)
        return new_id

    def update_by_id(self, collection: str, record_id: int, data: Any) -> bool:
        mirror = self.ensure_loaded(collection)
        content = encode_document(data, self.storage.max_entry_length)

        success = self.storage.update_by_id(collection, record_id, data)
        if success:
            self._drop_duplicates(mirror, content, record_id)
            mirror[record_id] = decode_document(content)
        return success

    def delete_by_id(self, collection: str, record_id: int) -> bool:
        mirror = self.ensure_loaded(collection)

        success = self.storage.delete_by_id(collection, record_id)
        if success:
            mirror.pop(record_id, None)
        return success
