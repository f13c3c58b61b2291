"""
Document codec - the string form records take inside the backing store.

Documents are stored as compact JSON. Encoding validates the document and
its size; decoding never raises, because collections may hold entries
written by other tools.
"""

import json
from typing import Any

from scoredb.core.config import get_logger
from scoredb.core.errors import InvalidArgumentError, SizeLimitExceededError

logger = get_logger("storage.codec")


def encode_document(data: Any, max_length: int) -> str:
    """
    Serialize a document for storage.

    Raises:
        InvalidArgumentError: data is None or not JSON serializable
        SizeLimitExceededError: the encoded form is longer than max_length
    """
    if data is None:
        raise InvalidArgumentError("Cannot save 'None' data.")
    try:
        content = dumps_compact(data)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Data is not serializable: {e}") from e
    if len(content) > max_length:
        raise SizeLimitExceededError(len(content), max_length)
    return content


def decode_document(content: str) -> Any | None:
    """Parse stored content, returning None for anything that is not a JSON document."""
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        logger.debug(f"Skipping foreign entry: {content[:40]!r}")
        return None
    return parsed


def dumps_compact(data: Any) -> str:
    """The exact string a document is stored as."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
