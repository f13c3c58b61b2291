"""
Relation - foreign-key style hydration across collections.

Bindings are registered per source collection:
- direct: the source document holds one id (or a list of ids) of target records
- reverse: target documents hold a field pointing back at the source, either
  as a single value or as a member of a list

populate() returns a shallow copy of the input with every related document
injected under the binding's alias. The input itself is never modified, and
every output gets its own copies of the related documents.
"""

import copy
from collections.abc import Iterable
from typing import Any, Protocol

from scoredb.core.config import get_logger
from scoredb.core.errors import InvalidArgumentError
from scoredb.core.types import Binding, Record, contains_strict, strict_equals

logger = get_logger("storage.relation")


class RecordReader(Protocol):
    """Anything that can list a collection: the storage engine or the cache."""

    def get_elements(self, collection: str) -> list[Record]:
        ...


class Relation:
    """Registry of bindings plus the hydration algorithm."""

    def __init__(self, reader: RecordReader):
        self.reader = reader
        self._bindings: dict[str, list[Binding]] = {}

    # =========================
    # Definition
    # =========================

    def bind(
        self,
        source: str,
        local_field: str,
        target: str,
        target_field: str,
        alias: str,
        reverse: bool = False,
    ) -> Binding:
        """
        Register a relation from source to target.

        Args:
            source: Collection whose documents get hydrated
            local_field: Field of the source document holding the reference
            target: Collection holding the related documents
            target_field: Field of the target documents to compare against
            alias: Output field receiving the related data
            reverse: The target documents point back to the source instead

        Raises:
            InvalidArgumentError: any name is empty or not a string
        """
        params = (source, local_field, target, target_field, alias)
        if not all(isinstance(param, str) and param for param in params):
            raise InvalidArgumentError("All binding parameters must be valid non-empty strings.")

        binding = Binding(
            source=source,
            local_field=local_field,
            target=target,
            target_field=target_field,
            alias=alias,
            reverse=reverse,
        )
        self._bindings.setdefault(source, []).append(binding)
        logger.debug(
            f"Bound {source}.{local_field} -> {target}.{target_field} as '{alias}'"
            f"{' (reverse)' if reverse else ''}"
        )
        return binding

    def bind_reverse(
        self,
        source: str,
        local_field: str,
        target: str,
        target_field: str,
        alias: str,
    ) -> Binding:
        """Register a relation where the target documents reference the source."""
        return self.bind(source, local_field, target, target_field, alias, reverse=True)

    def bindings_for(self, collection: str) -> list[Binding]:
        return list(self._bindings.get(collection, []))

    # =========================
    # Hydration
    # =========================

    def populate(
        self,
        collection: str,
        raw: Any,
        aliases: str | Iterable[str] | None = None,
    ) -> Any:
        """
        Hydrate a document, or a list of documents, from collection.

        Args:
            collection: Collection the documents come from
            raw: A document or a list of documents
            aliases: Only resolve bindings with these aliases

        Returns:
            A copy of raw with alias fields added, or None when raw is None
        """
        if raw is None:
            return None

        bindings = self._bindings.get(collection)
        if not bindings:
            return raw

        if aliases is not None:
            wanted = {aliases} if isinstance(aliases, str) else set(aliases)
            bindings = [binding for binding in bindings if binding.alias in wanted]

        # Each target collection is read at most once per binding and call
        targets: dict[int, list[Record]] = {}

        def target_records(index: int, binding: Binding) -> list[Record]:
            if index not in targets:
                targets[index] = self.reader.get_elements(binding.target)
            return targets[index]

        def process_single(document: dict[str, Any]) -> dict[str, Any]:
            result = dict(document)
            for index, binding in enumerate(bindings):
                local_value = result.get(binding.local_field)

                if local_value is None:
                    result[binding.alias] = [] if binding.reverse else None
                    continue

                records = target_records(index, binding)
                if binding.reverse:
                    result[binding.alias] = self._reverse_matches(records, binding, local_value)
                elif isinstance(local_value, list):
                    found = (self._first_match(records, binding, value) for value in local_value)
                    result[binding.alias] = [data for data in found if data is not None]
                else:
                    result[binding.alias] = self._first_match(records, binding, local_value)
            return result

        if isinstance(raw, list):
            return [None if document is None else process_single(document) for document in raw]
        return process_single(raw)

    @staticmethod
    def _field(record: Record, field: str) -> Any:
        if isinstance(record.data, dict):
            return record.data.get(field)
        return None

    def _first_match(self, records: list[Record], binding: Binding, value: Any) -> Any | None:
        for record in records:
            if strict_equals(self._field(record, binding.target_field), value):
                return copy.deepcopy(record.data)
        return None

    def _reverse_matches(self, records: list[Record], binding: Binding, value: Any) -> list[Any]:
        matches = []
        for record in records:
            target_value = self._field(record, binding.target_field)
            if isinstance(target_value, list):
                if contains_strict(target_value, value):
                    matches.append(copy.deepcopy(record.data))
            elif strict_equals(target_value, value):
                matches.append(copy.deepcopy(record.data))
        return matches

    # =========================
    # Cleanup
    # =========================

    def reset(self) -> None:
        """Forget every binding. Call once at startup or reload."""
        self._bindings.clear()
