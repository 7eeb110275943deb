"""
Document collection abstraction.

Every resource (users, projects, achievements, research) is a collection of
JSON-shaped documents. Backends implement `Collection`; routes and the
pagination core only ever talk to this interface.

A predicate is a plain mapping `field -> Condition`. Full-text search is keyed
by `TEXT_SEARCH_KEY` and is resolved against the collection's text index.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol, Union

TEXT_SEARCH_KEY = "$text"

ASCENDING = 1
DESCENDING = -1

_WORD_RE = re.compile(r"\w+", re.UNICODE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """
    Stored dates are ISO strings; return None for anything that is not one.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_document(document: Mapping[str, Any]) -> str:
    return json.dumps(document, default=_json_default, ensure_ascii=True)


def normalize_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """
    Round-trip through JSON so every backend stores the same shapes
    (datetimes become UTC ISO strings).
    """
    return json.loads(encode_document(document))


def text_terms(text: str) -> tuple[str, ...]:
    return tuple(dict.fromkeys(t.lower() for t in _WORD_RE.findall(text or "")))


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class DuplicateKeyError(RuntimeError):
    """A write would break a unique index (e.g. user email)."""


@dataclass(frozen=True)
class Equals:
    value: Any

    def matches(self, value: Any) -> bool:
        return value == self.value


@dataclass(frozen=True)
class AnyOf:
    """Field value (or any element of an array field) is one of `values`."""

    values: tuple[str, ...]

    def matches(self, value: Any) -> bool:
        wanted = set(self.values)
        return any(item in wanted for item in _as_list(value))


@dataclass(frozen=True)
class Contains:
    """Case-insensitive literal substring match (array fields: any element)."""

    text: str

    def matches(self, value: Any) -> bool:
        needle = self.text.lower()
        return any(isinstance(item, str) and needle in item.lower() for item in _as_list(value))


@dataclass(frozen=True)
class Range:
    gte: datetime | None = None
    lte: datetime | None = None
    lt: datetime | None = None

    def matches(self, value: Any) -> bool:
        moment = parse_datetime(value)
        if moment is None:
            return False
        if self.gte is not None and moment < as_utc(self.gte):
            return False
        if self.lte is not None and moment > as_utc(self.lte):
            return False
        if self.lt is not None and moment >= as_utc(self.lt):
            return False
        return True


@dataclass(frozen=True)
class TextSearch:
    """Matches documents whose text index contains any of `terms`."""

    terms: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "TextSearch":
        return cls(terms=text_terms(text))

    def matches_text(self, text: str) -> bool:
        words = set(text_terms(text))
        return any(term in words for term in self.terms)


Condition = Union[Equals, AnyOf, Contains, Range, TextSearch]
Predicate = dict[str, Condition]
SortSpec = dict[str, int]


@dataclass(frozen=True)
class Populate:
    """
    Expand a reference field (`field` holds an id in `collection`) into the
    referenced document's `fields` subset.
    """

    field: str
    collection: str
    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class FindOptions:
    sort: SortSpec = field(default_factory=dict)
    projection: frozenset[str] = frozenset()
    skip: int = 0
    limit: int | None = None
    populate: Populate | None = None


class Collection(Protocol):
    name: str
    text_fields: tuple[str, ...]

    async def find(self, predicate: Predicate, options: FindOptions | None = None) -> list[dict[str, Any]]:
        ...

    async def count(self, predicate: Predicate) -> int:
        ...

    async def distinct(self, field_name: str, predicate: Predicate | None = None) -> list[Any]:
        ...

    async def get(self, document_id: str, *, populate: Populate | None = None) -> dict[str, Any] | None:
        ...

    async def insert(self, document: Mapping[str, Any]) -> dict[str, Any]:
        ...

    async def update(self, document_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        ...

    async def delete(self, document_id: str) -> bool:
        ...


def project_document(document: dict[str, Any], projection: frozenset[str]) -> dict[str, Any]:
    """
    Keep only projected fields. `id` always survives; an empty projection
    keeps everything.
    """
    if not projection:
        return document
    return {k: v for k, v in document.items() if k == "id" or k in projection}


def referenced_subset(reference: dict[str, Any] | None, fields: tuple[str, ...]) -> dict[str, Any] | None:
    if reference is None:
        return None
    if not fields:
        return reference
    subset = {"id": reference.get("id")}
    for name in fields:
        if name in reference:
            subset[name] = reference[name]
    return subset
