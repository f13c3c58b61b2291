"""
Core type definitions for ScoreDB.

- Record: an (id, data) pair read back from a collection
- Binding: a relation rule between two collections
- Query: Equality(fields) | Predicate(fn), the two ways to select records
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from scoredb.core.errors import InvalidArgumentError


# ============================================
# Records
# ============================================

@dataclass
class Record:
    """A stored document together with the id the engine assigned to it."""

    id: int
    """Engine-assigned id, unique within the collection."""

    data: Any
    """The parsed document."""


@dataclass(frozen=True)
class CollectionHandle:
    """Opaque reference to a collection inside a backing store."""

    name: str


# ============================================
# Relations
# ============================================

class Binding(BaseModel):
    """A registered relation between a source and a target collection."""

    model_config = ConfigDict(frozen=True)

    source: str
    """Collection whose documents get hydrated."""

    local_field: str
    """Field read from the source document."""

    target: str
    """Collection scanned for related documents."""

    target_field: str
    """Field of the target documents compared with the local value."""

    alias: str
    """Field of the output document receiving the related data."""

    reverse: bool = False
    """True when the target documents hold the reference back to the source."""


# ============================================
# Strict comparison
# ============================================

def strict_equals(left: Any, right: Any) -> bool:
    """
    Compare two JSON values without type coercion.

    Booleans only equal booleans, numbers compare numerically regardless of
    int/float, and containers compare element by element with the same rules.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(strict_equals(a, b) for a, b in zip(left, right))
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(left[key], right[key]) for key in left)
    return left is right


def contains_strict(values: list[Any], needle: Any) -> bool:
    """Membership test using strict_equals."""
    return any(strict_equals(value, needle) for value in values)


# ============================================
# Queries
# ============================================

_MISSING = object()


@dataclass(frozen=True)
class Equality:
    """Matches documents whose top-level fields strictly equal every given value."""

    fields: Mapping[str, Any] = field(default_factory=dict)

    def matches(self, document: Any) -> bool:
        if not isinstance(document, Mapping):
            return not self.fields
        for key, expected in self.fields.items():
            actual = document.get(key, _MISSING)
            if actual is _MISSING or not strict_equals(actual, expected):
                return False
        return True


@dataclass(frozen=True)
class Predicate:
    """Matches documents for which the wrapped function returns a truthy value."""

    fn: Callable[[Any], Any]

    def matches(self, document: Any) -> bool:
        return bool(self.fn(document))


Query = Union[Equality, Predicate]


def as_query(query: Any) -> Query | None:
    """
    Normalize a caller-supplied query.

    Mappings become Equality, callables become Predicate, None stays None.
    """
    if query is None or isinstance(query, (Equality, Predicate)):
        return query
    if isinstance(query, Mapping):
        return Equality(dict(query))
    if callable(query):
        return Predicate(query)
    raise InvalidArgumentError(
        f"Query must be a mapping, a function, or None, got {type(query).__name__}."
    )
