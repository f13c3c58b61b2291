"""
Pytest configuration and fixtures for ScoreDB tests.
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Set test environment before importing app modules
os.environ["SCOREDB_DATA_DIR"] = tempfile.mkdtemp()
os.environ["SCOREDB_BACKEND"] = "memory"

from scoredb.core.types import CollectionHandle  # noqa: E402
from scoredb.storage.backend import MemoryBackingStore, SqliteBackingStore  # noqa: E402
from scoredb.storage.cache import CacheManager  # noqa: E402
from scoredb.storage.engine import ScoreboardStorage  # noqa: E402
from scoredb.storage.relation import Relation  # noqa: E402


class CountingBackingStore(MemoryBackingStore):
    """Memory store that records how often each collection is enumerated."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enumerations: dict[str, int] = {}

    def list_entries(self, handle: CollectionHandle):
        self.enumerations[handle.name] = self.enumerations.get(handle.name, 0) + 1
        return super().list_entries(handle)


@pytest.fixture
def backend() -> CountingBackingStore:
    """Fresh in-memory backing store."""
    return CountingBackingStore()


@pytest.fixture
def storage(backend) -> ScoreboardStorage:
    """Storage engine over the in-memory backing store."""
    return ScoreboardStorage(backend)


@pytest.fixture
def cache(storage) -> CacheManager:
    return CacheManager(storage)


@pytest.fixture
def relation(storage) -> Relation:
    """Relation resolver reading straight from storage."""
    return Relation(storage)


@pytest.fixture
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary SQLite file path for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "scoreboard.sqlite"


@pytest.fixture
def sqlite_backend(temp_db_path) -> SqliteBackingStore:
    return SqliteBackingStore(temp_db_path)


@pytest.fixture
def sample_guilds() -> list[dict]:
    """Sample guild documents."""
    return [
        {"uuid": "g1", "name": "Builders"},
        {"uuid": "g2", "name": "Miners"},
        {"uuid": "g3", "name": "Farmers"},
    ]


@pytest.fixture
def sample_users() -> list[dict]:
    """Sample user documents referencing guilds."""
    return [
        {"name": "Steve", "guildId": "g1", "rank": 1},
        {"name": "Alex", "guildId": "g1", "rank": 2},
        {"name": "Herobrine", "guildId": "g2", "rank": 1},
    ]
