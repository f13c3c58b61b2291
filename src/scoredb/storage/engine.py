"""
Scoreboard Storage - CRUD and queries over a backing store.

Collection  → logical database (a scoreboard objective)
Content     → JSON string of the document (the participant)
Id          → unique integer attached to the entry (the score)

There is no index: every operation scans the collection in the order the
backing store enumerates it, and "first match" always means first in that
order. Entries whose content is not JSON are treated as foreign data and
skipped.
"""

from collections.abc import Callable, Mapping
from typing import Any

from scoredb.core.config import settings, get_logger
from scoredb.core.errors import InvalidArgumentError
from scoredb.core.types import CollectionHandle, Equality, Predicate, Query, Record, as_query
from scoredb.storage.backend import BackingStore, validate_collection_name
from scoredb.storage.codec import decode_document, encode_document

logger = get_logger("storage.engine")


def validate_record_id(record_id: object) -> int:
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        raise InvalidArgumentError(f"ID must be an integer, got {type(record_id).__name__}.")
    return record_id


class ScoreboardStorage:
    """
    Document store over a BackingStore.

    Collections are created lazily by the first write. Reads on a missing
    collection behave like reads on an empty one and never create it.
    """

    def __init__(
        self,
        backend: BackingStore,
        max_name_length: int | None = None,
        max_entry_length: int | None = None,
    ):
        self.backend = backend
        if max_name_length is None:
            max_name_length = settings.max_collection_name_length
        if max_entry_length is None:
            max_entry_length = settings.max_entry_length
        self.max_name_length = max_name_length
        self.max_entry_length = max_entry_length

    # =========================
    # Internal utilities
    # =========================

    def _check_name(self, collection: str) -> str:
        return validate_collection_name(collection, self.max_name_length)

    def _lookup(self, collection: str) -> CollectionHandle | None:
        return self.backend.get_collection(self._check_name(collection))

    def _entries(self, handle: CollectionHandle) -> list[tuple[str, int]]:
        # Materialized so callers can mutate the collection while iterating
        return list(self.backend.list_entries(handle))

    def _next_id(self, handle: CollectionHandle) -> int:
        return max((entry_id for _, entry_id in self._entries(handle)), default=0) + 1

    def _stringify(self, data: Any) -> str:
        return encode_document(data, self.max_entry_length)

    def _parse(self, content: str) -> Any | None:
        return decode_document(content)

    def _scan(self, handle: CollectionHandle, query: Query | None) -> list[tuple[str, Record]]:
        """Return (content, record) for every parsable entry matching the query."""
        matches = []
        for content, entry_id in self._entries(handle):
            parsed = self._parse(content)
            if parsed is None:
                continue
            if query is None or query.matches(parsed):
                matches.append((content, Record(id=entry_id, data=parsed)))
        return matches

    @staticmethod
    def _require_predicate(callback: Any) -> Predicate:
        if isinstance(callback, Predicate):
            return callback
        if not callable(callback):
            raise InvalidArgumentError("Callback must be a function.")
        return Predicate(callback)

    # =========================
    # Write
    # =========================

    def save(self, collection: str, data: Any) -> int:
        """
        Save a document and return its new id.

        Raises:
            InvalidArgumentError: bad collection name or unserializable data
            SizeLimitExceededError: serialized data is too long
        """
        self._check_name(collection)
        content = self._stringify(data)
        handle = self.backend.get_or_create_collection(collection)
        new_id = self._next_id(handle)
        self.backend.set_entry(handle, content, new_id)
        logger.debug(f"Saved record {new_id} in {collection}")
        return new_id

    # =========================
    # Read
    # =========================

    def get_element_by_id(self, collection: str, record_id: int) -> Any | None:
        """Return the document with this id, or None."""
        validate_record_id(record_id)
        handle = self._lookup(collection)
        if handle is None:
            return None
        for content, entry_id in self._entries(handle):
            if entry_id == record_id:
                return self._parse(content)
        return None

    def get_elements(self, collection: str, query: Any = None) -> list[Record]:
        """
        Return every record matching the query.

        Args:
            collection: Collection name
            query: Equality mapping, predicate function, or None for all
        """
        query = as_query(query)
        handle = self._lookup(collection)
        if handle is None:
            return []
        return [record for _, record in self._scan(handle, query)]

    def find(self, collection: str, predicate: Callable[[Any], Any]) -> Record | None:
        """Return the first record the predicate accepts."""
        query = self._require_predicate(predicate)
        handle = self._lookup(collection)
        if handle is None:
            return None
        for content, entry_id in self._entries(handle):
            parsed = self._parse(content)
            if parsed is not None and query.matches(parsed):
                return Record(id=entry_id, data=parsed)
        return None

    def find_all(self, collection: str, predicate: Callable[[Any], Any]) -> list[Record]:
        """Return every record the predicate accepts."""
        query = self._require_predicate(predicate)
        handle = self._lookup(collection)
        if handle is None:
            return []
        return [record for _, record in self._scan(handle, query)]

    # =========================
    # Update
    # =========================

    def update_by_id(self, collection: str, record_id: int, data: Any) -> bool:
        """Replace the document with this id. Returns False if no record has it."""
        validate_record_id(record_id)
        handle = self._lookup(collection)
        content = self._stringify(data)
        if handle is None:
            return False
        for old_content, entry_id in self._entries(handle):
            if entry_id == record_id:
                self.backend.replace_entries(handle, [(old_content, content)])
                logger.debug(f"Replaced record {record_id} in {collection}")
                return True
        return False

    def update(self, collection: str, query: Any, data: Any) -> int:
        """
        Update every record matching the query.

        With a mapping, its fields are merged over the old document; with a
        function, the old document is replaced by its return value. All new
        documents are serialized before anything is written, so a failure
        leaves the collection untouched.

        Returns:
            Number of records updated
        """
        if query is None:
            raise InvalidArgumentError("Query must be provided for mass update.")
        if data is None:
            raise InvalidArgumentError("New data must be provided for update.")
        query = as_query(query)
        transform = data if callable(data) and not isinstance(data, Mapping) else None
        if transform is None and not isinstance(data, Mapping):
            raise InvalidArgumentError("New data must be a mapping or a function.")

        handle = self._lookup(collection)
        if handle is None:
            return 0

        planned: list[tuple[str, str]] = []
        for old_content, record in self._scan(handle, query):
            if transform is not None:
                new_data = transform(record.data)
            elif isinstance(record.data, Mapping):
                new_data = {**record.data, **data}
            else:
                continue
            planned.append((old_content, self._stringify(new_data)))

        # Applied in scan order, each entry keeping the id its content holds when
        # its turn comes. An earlier change can move an id onto a later match.
        self.backend.replace_entries(handle, planned)

        logger.debug(f"Updated {len(planned)} records in {collection}")
        return len(planned)

    # =========================
    # Delete
    # =========================

    def delete_by_id(self, collection: str, record_id: int) -> bool:
        """Delete the record with this id. Returns False if no record has it."""
        validate_record_id(record_id)
        handle = self._lookup(collection)
        if handle is None:
            return False
        for content, entry_id in self._entries(handle):
            if entry_id == record_id:
                self.backend.remove_entry(handle, content)
                logger.debug(f"Deleted record {record_id} from {collection}")
                return True
        return False

    def delete(self, collection: str, query: Any = None) -> int:
        """Delete every record matching the query and return how many were removed."""
        query = as_query(query)
        handle = self._lookup(collection)
        if handle is None:
            return 0
        deleted = 0
        for content, _ in self._scan(handle, query):
            self.backend.remove_entry(handle, content)
            deleted += 1
        logger.debug(f"Deleted {deleted} records from {collection}")
        return deleted

    # =========================
    # Utilities
    # =========================

    def exists(self, collection: str, query: Any = None) -> bool:
        """
        Check whether a collection holds matching data.

        - None: the collection has at least one entry
        - int: a record with this id exists (ids only, nothing is parsed)
        - mapping: some record matches field by field
        """
        if isinstance(query, int) and not isinstance(query, bool):
            record_id = query
            query = None
        elif query is None or isinstance(query, (Mapping, Equality)):
            record_id = None
            query = as_query(query)
        else:
            raise InvalidArgumentError("Query must be an integer id, a mapping, or None.")

        handle = self._lookup(collection)
        if handle is None:
            return False
        entries = self._entries(handle)

        if record_id is not None:
            return any(entry_id == record_id for _, entry_id in entries)
        if query is None:
            return len(entries) > 0
        for content, _ in entries:
            parsed = self._parse(content)
            if parsed is not None and query.matches(parsed):
                return True
        return False

    def count(self, collection: str, query: Any = None) -> int:
        """Count all entries, or the records matching the query."""
        query = as_query(query)
        handle = self._lookup(collection)
        if handle is None:
            return 0
        if query is None:
            return len(self._entries(handle))
        return len(self._scan(handle, query))

    def clear(self, collection: str) -> None:
        """Remove every entry of the collection. No-op if it doesn't exist."""
        handle = self._lookup(collection)
        if handle is None:
            return
        for content, _ in self._entries(handle):
            self.backend.remove_entry(handle, content)
        logger.debug(f"Cleared {collection}")
