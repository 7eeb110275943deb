"""
In-process document store.

Used by the test-suite and for running the API without Postgres
(`DOCUMENT_STORE=memory`). Semantics follow the Postgres backend: JSON-shaped
documents, any-term full-text search, nulls sorted last, ties broken by id.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from .collection import (
    TEXT_SEARCH_KEY,
    DESCENDING,
    DuplicateKeyError,
    FindOptions,
    Populate,
    Predicate,
    TextSearch,
    normalize_document,
    project_document,
    referenced_subset,
    utc_now,
)
from .query import new_id

# jsonb ordering between types: numbers < strings < booleans < arrays < objects.
_TYPE_RANK = {bool: 2, int: 0, float: 0, str: 1, list: 3, dict: 4}


def _sort_value(value: Any) -> tuple:
    if value is None:
        return (1, 0, None)
    rank = _TYPE_RANK.get(type(value), 5)
    if rank >= 3:
        value = repr(value)
    return (0, rank, value)


class _Descending:
    """Wrap a sort key so the natural order is reversed."""

    __slots__ = ("key",)

    def __init__(self, key: tuple) -> None:
        self.key = key

    def __lt__(self, other: "_Descending") -> bool:
        # Nulls stay last in both directions.
        if self.key[0] != other.key[0]:
            return self.key[0] < other.key[0]
        return self.key > other.key

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Descending) and self.key == other.key


class MemoryStore:
    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._collections: dict[str, MemoryCollection] = {}

    def collection(
        self,
        name: str,
        text_fields: tuple[str, ...] = (),
        unique_fields: tuple[str, ...] = (),
    ) -> "MemoryCollection":
        existing = self._collections.get(name)
        if existing is None:
            existing = MemoryCollection(self, name, text_fields, unique_fields)
            self._collections[name] = existing
        return existing

    def documents(self, name: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(name, {})

    def clear(self) -> None:
        self._data.clear()


class MemoryCollection:
    def __init__(
        self,
        store: MemoryStore,
        name: str,
        text_fields: tuple[str, ...] = (),
        unique_fields: tuple[str, ...] = (),
    ) -> None:
        self._store = store
        self.name = name
        self.text_fields = tuple(text_fields)
        self.unique_fields = tuple(unique_fields)

    @property
    def _docs(self) -> dict[str, dict[str, Any]]:
        return self._store.documents(self.name)

    def _check_unique(self, candidate: dict[str, Any], document_id: str) -> None:
        # Case-insensitive, like the lower(...) unique index in Postgres.
        for field_name in self.unique_fields:
            value = candidate.get(field_name)
            if not isinstance(value, str):
                continue
            for other_id, other in self._docs.items():
                other_value = other.get(field_name)
                if other_id != document_id and isinstance(other_value, str) and other_value.lower() == value.lower():
                    raise DuplicateKeyError(f"Duplicate {field_name} in '{self.name}'.")

    def _matches(self, document: dict[str, Any], predicate: Predicate) -> bool:
        for field_name, condition in predicate.items():
            if field_name == TEXT_SEARCH_KEY:
                if not isinstance(condition, TextSearch):
                    raise TypeError(f"{TEXT_SEARCH_KEY} requires a TextSearch condition")
                text = " ".join(str(document.get(f) or "") for f in self.text_fields)
                if not condition.matches_text(text):
                    return False
                continue
            if not condition.matches(document.get(field_name)):
                return False
        return True

    def _filter(self, predicate: Predicate) -> list[dict[str, Any]]:
        return [doc for doc in self._docs.values() if self._matches(doc, predicate)]

    def _populate(self, document: dict[str, Any], populate: Populate | None) -> dict[str, Any]:
        if populate is None or populate.field not in document:
            return document
        ref_id = document.get(populate.field)
        reference = self._store.documents(populate.collection).get(ref_id) if isinstance(ref_id, str) else None
        document[populate.field] = referenced_subset(copy.deepcopy(reference), populate.fields)
        return document

    async def find(self, predicate: Predicate, options: FindOptions | None = None) -> list[dict[str, Any]]:
        options = options or FindOptions()
        matched = sorted(self._filter(predicate), key=lambda d: d["id"])
        for field_name, direction in reversed(list(options.sort.items())):
            if direction == DESCENDING:
                matched.sort(key=lambda d: _Descending(_sort_value(d.get(field_name))))
            else:
                matched.sort(key=lambda d: _sort_value(d.get(field_name)))

        end = None if options.limit is None else options.skip + options.limit
        page = matched[options.skip:end]
        return [
            self._populate(project_document(copy.deepcopy(doc), options.projection), options.populate)
            for doc in page
        ]

    async def count(self, predicate: Predicate) -> int:
        return len(self._filter(predicate))

    async def distinct(self, field_name: str, predicate: Predicate | None = None) -> list[Any]:
        seen: dict[Any, None] = {}
        for doc in self._filter(predicate or {}):
            value = doc.get(field_name)
            for item in value if isinstance(value, list) else [value]:
                if item is None or item == "":
                    continue
                seen.setdefault(item, None)
        return list(seen)

    async def get(self, document_id: str, *, populate: Populate | None = None) -> dict[str, Any] | None:
        doc = self._docs.get(document_id)
        if doc is None:
            return None
        return self._populate(copy.deepcopy(doc), populate)

    async def insert(self, document: Mapping[str, Any]) -> dict[str, Any]:
        now = utc_now()
        stored = normalize_document({**document, "id": new_id(), "createdAt": now, "updatedAt": now})
        self._check_unique(stored, stored["id"])
        self._docs[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update(self, document_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        current = self._docs.get(document_id)
        if current is None:
            return None
        patch = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
        patch = normalize_document({**patch, "updatedAt": utc_now()})
        self._check_unique({**current, **patch}, document_id)
        current.update(patch)
        return copy.deepcopy(current)

    async def delete(self, document_id: str) -> bool:
        return self._docs.pop(document_id, None) is not None
