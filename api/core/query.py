"""
Turn list-endpoint filters into a collection predicate, sort and projection.

Everything here is pure: inputs arrive already parsed from the HTTP layer
(see `core/params.py`) and the results are handed to the collection.
"""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from .collection import (
    TEXT_SEARCH_KEY,
    ASCENDING,
    DESCENDING,
    AnyOf,
    Contains,
    Equals,
    Predicate,
    Range,
    SortSpec,
    TextSearch,
)

_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")

DEFAULT_SORT = "-createdAt"


@dataclass(frozen=True)
class FilterRequest:
    text_query: str | None = None
    tags: str | None = None
    status: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    category: str | None = None
    organization: str | None = None
    venue: str | None = None
    author: str | None = None
    year: int | None = None


def split_tags(raw: str | None) -> tuple[str, ...]:
    tags = (tag.strip().lower() for tag in (raw or "").split(","))
    return tuple(dict.fromkeys(tag for tag in tags if tag))


def build_query(filters: FilterRequest, searchable_fields: Iterable[str] = ()) -> Predicate:
    """
    Build the generic part of a list predicate.

    `searchable_fields` only gates whether full-text search is attempted;
    the collection's text index decides which fields are scanned.
    Resource-specific filters are added by the caller afterwards.
    """
    query: Predicate = {}

    text = (filters.text_query or "").strip()
    if text and tuple(searchable_fields):
        search = TextSearch.from_text(text)
        if search.terms:
            query[TEXT_SEARCH_KEY] = search

    tags = split_tags(filters.tags)
    if tags:
        # Match-any: a document qualifies with at least one requested tag.
        query["tags"] = AnyOf(tags)

    if filters.status:
        query["status"] = Equals(filters.status)

    if filters.start_date is not None or filters.end_date is not None:
        query["createdAt"] = Range(gte=filters.start_date, lte=filters.end_date)

    return query


def contains_filter(text: str | None) -> Contains | None:
    text = (text or "").strip()
    return Contains(text) if text else None


def year_range(year: int) -> Range:
    return Range(
        gte=datetime(year, 1, 1, tzinfo=timezone.utc),
        lt=datetime(year + 1, 1, 1, tzinfo=timezone.utc),
    )


def build_sort(token: str | None, default_token: str = DEFAULT_SORT) -> SortSpec:
    token = (token or "").strip()
    if not token.lstrip("-"):
        token = default_token

    if token.startswith("-"):
        return {token[1:]: DESCENDING}
    return {token: ASCENDING}


def build_projection(fields_token: str | None) -> frozenset[str]:
    """
    `"title, tags"` -> {"title", "tags"}. Empty means all fields.
    """
    fields = (name.strip() for name in (fields_token or "").split(","))
    return frozenset(name for name in fields if name)


def is_valid_id(value: str | None) -> bool:
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None


def new_id() -> str:
    # 4-byte epoch seconds + 8 random bytes, same shape as a Mongo ObjectId.
    return int(time.time()).to_bytes(4, "big").hex() + os.urandom(8).hex()
