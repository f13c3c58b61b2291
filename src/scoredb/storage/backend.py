"""
Backing Stores - the key/value primitive records live in.

A backing store exposes named collections of (content, id) entries, the
shape of a scoreboard objective: the content string is the participant and
the id is its score. The content string is the entry's identity, so writing
content that already exists only moves that entry to the new id.

Two implementations:
1. MemoryBackingStore → in-process, ephemeral (tests, scratch sessions)
2. SqliteBackingStore → durable, one SQLite file
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Protocol

from scoredb.core.config import settings, get_logger
from scoredb.core.errors import CollectionCreationError, InvalidArgumentError
from scoredb.core.types import CollectionHandle

logger = get_logger("storage.backend")


def validate_collection_name(name: object, max_length: int | None = None) -> str:
    """Check a collection name and return it. The length bound is only checked when given."""
    if not isinstance(name, str) or name.strip() == "":
        raise InvalidArgumentError(
            f"Invalid collection name: {name!r}. Must be a non-empty string."
        )
    if max_length is not None and len(name) > max_length:
        raise InvalidArgumentError(
            f"Collection name '{name}' exceeds the {max_length}-character limit."
        )
    return name


class BackingStore(Protocol):
    """Contract the storage engine consumes."""

    def get_collection(self, name: str) -> CollectionHandle | None:
        """Look a collection up without creating it."""
        ...

    def get_or_create_collection(self, name: str) -> CollectionHandle:
        """Return the collection, creating it first when absent. Name length is bounded by the engine."""
        ...

    def collection_exists(self, name: str) -> bool:
        ...

    def list_collections(self) -> list[str]:
        ...

    def list_entries(self, handle: CollectionHandle) -> Iterator[tuple[str, int]]:
        """Yield (content, id) pairs in a stable order for this call."""
        ...

    def set_entry(self, handle: CollectionHandle, content: str, entry_id: int) -> None:
        """Upsert keyed by content: existing content only gets its id replaced."""
        ...

    def remove_entry(self, handle: CollectionHandle, content: str) -> bool:
        ...

    def replace_entries(self, handle: CollectionHandle, changes: list[tuple[str, str]]) -> None:
        """
        Swap contents in order, each keeping the id its old content holds at that
        moment. All changes apply together or not at all.
        """
        ...


class MemoryBackingStore(BackingStore):
    """
    In-memory backing store.

    Collections are insertion-ordered dicts mapping content → id, which
    mirrors how the reference host keys entries by their content.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, int]] = {}

    def _create(self, name: str) -> None:
        self._collections[name] = {}

    def get_collection(self, name: str) -> CollectionHandle | None:
        if name in self._collections:
            return CollectionHandle(name)
        return None

    def get_or_create_collection(self, name: str) -> CollectionHandle:
        validate_collection_name(name)
        if name not in self._collections:
            try:
                self._create(name)
            except Exception as e:
                raise CollectionCreationError(name, str(e)) from e
            logger.debug(f"Created collection {name}")
        return CollectionHandle(name)

    def collection_exists(self, name: str) -> bool:
        return name in self._collections

    def list_collections(self) -> list[str]:
        return list(self._collections)

    def list_entries(self, handle: CollectionHandle) -> Iterator[tuple[str, int]]:
        entries = self._collections.get(handle.name, {})
        return iter(list(entries.items()))

    def set_entry(self, handle: CollectionHandle, content: str, entry_id: int) -> None:
        self._collections.setdefault(handle.name, {})[content] = entry_id

    def remove_entry(self, handle: CollectionHandle, content: str) -> bool:
        entries = self._collections.get(handle.name)
        if entries is None or content not in entries:
            return False
        del entries[content]
        return True

    def replace_entries(self, handle: CollectionHandle, changes: list[tuple[str, str]]) -> None:
        entries = self._collections.setdefault(handle.name, {})
        for old_content, new_content in changes:
            entry_id = entries.pop(old_content, None)
            if entry_id is not None:
                entries[new_content] = entry_id


class SqliteBackingStore(BackingStore):
    """
    SQLite backing store.

    Tables:
    - collections: known collection names
    - entries: (collection, content, score) with content as part of the key
    """

    def __init__(self, db_path: Path | None = None):
        """Initialize the SQLite store."""
        self.db_path = db_path or settings.db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS collections (
                    name TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # The content string is the entry's identity, the score is an attribute
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    collection TEXT NOT NULL,
                    content TEXT NOT NULL,
                    score INTEGER NOT NULL,
                    PRIMARY KEY (collection, content),
                    FOREIGN KEY (collection) REFERENCES collections(name)
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_entries_score ON entries(collection, score)")
            conn.commit()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def get_collection(self, name: str) -> CollectionHandle | None:
        if self.collection_exists(name):
            return CollectionHandle(name)
        return None

    def get_or_create_collection(self, name: str) -> CollectionHandle:
        validate_collection_name(name)
        try:
            with self._get_connection() as conn:
                cursor = conn.execute("INSERT OR IGNORE INTO collections (name) VALUES (?)", (name,))
                conn.commit()
        except sqlite3.Error as e:
            raise CollectionCreationError(name, str(e)) from e
        if cursor.rowcount > 0:
            logger.debug(f"Created collection {name}")
        return CollectionHandle(name)

    def collection_exists(self, name: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute("SELECT 1 FROM collections WHERE name = ?", (name,)).fetchone()
        return row is not None

    def list_collections(self) -> list[str]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT name FROM collections ORDER BY rowid").fetchall()
        return [row[0] for row in rows]

    def list_entries(self, handle: CollectionHandle) -> Iterator[tuple[str, int]]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT content, score FROM entries WHERE collection = ? ORDER BY rowid",
                (handle.name,),
            ).fetchall()
        return iter([(content, score) for content, score in rows])

    def set_entry(self, handle: CollectionHandle, content: str, entry_id: int) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO entries (collection, content, score) VALUES (?, ?, ?)
                ON CONFLICT(collection, content) DO UPDATE SET score = excluded.score
                """,
                (handle.name, content, entry_id),
            )
            conn.commit()

    def remove_entry(self, handle: CollectionHandle, content: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM entries WHERE collection = ? AND content = ?",
                (handle.name, content),
            )
            conn.commit()
        return cursor.rowcount > 0

    def replace_entries(self, handle: CollectionHandle, changes: list[tuple[str, str]]) -> None:
        with self._get_connection() as conn:
            try:
                for old_content, new_content in changes:
                    row = conn.execute(
                        "SELECT score FROM entries WHERE collection = ? AND content = ?",
                        (handle.name, old_content),
                    ).fetchone()
                    if row is None:
                        continue
                    conn.execute(
                        "DELETE FROM entries WHERE collection = ? AND content = ?",
                        (handle.name, old_content),
                    )
                    conn.execute(
                        """
                        INSERT INTO entries (collection, content, score) VALUES (?, ?, ?)
                        ON CONFLICT(collection, content) DO UPDATE SET score = excluded.score
                        """,
                        (handle.name, new_content, row[0]),
                    )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
