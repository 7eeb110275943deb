"""
Skip/offset pagination shared by every list endpoint.

`execute_paginated_query` reads one page and the total count concurrently and
wraps them in a `{data, meta}` result. The page and the count are separate
reads, so under concurrent writes `total` may be off by the items written in
between; that is accepted.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any

from .collection import Collection, FindOptions, Populate, Predicate, SortSpec
from .query import DEFAULT_SORT, build_sort

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class QueryExecutionError(RuntimeError):
    pass


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int
    skip: int


@dataclass(frozen=True)
class PageResult:
    data: list[dict[str, Any]]
    meta: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {"data": self.data, "meta": self.meta}


def paginate(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> PageWindow:
    """
    Resolve page/limit into a bounded window. Callers validate first; the
    clamp still applies so no caller can request an unbounded page.
    """
    limit = max(1, min(int(limit), MAX_LIMIT))
    page = max(int(page), 1)
    return PageWindow(page=page, limit=limit, skip=(page - 1) * limit)


def build_meta(page: int, limit: int, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if total > 0 else 0
    has_next = page < total_pages
    has_prev = page > 1
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNextPage": has_next,
        "hasPrevPage": has_prev,
        "nextPage": page + 1 if has_next else None,
        "prevPage": page - 1 if has_prev else None,
    }


async def execute_paginated_query(
    collection: Collection,
    predicate: Predicate,
    *,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    sort: SortSpec | None = None,
    projection: frozenset[str] = frozenset(),
    populate: Populate | None = None,
    logger: logging.Logger | None = None,
) -> PageResult:
    window = paginate(page, limit)
    options = FindOptions(
        sort=sort or build_sort(None, DEFAULT_SORT),
        projection=projection,
        skip=window.skip,
        limit=window.limit,
        populate=populate,
    )
    if logger is not None:
        logger.debug(
            "paginated_query collection=%s predicate=%r sort=%r skip=%s limit=%s",
            collection.name,
            predicate,
            options.sort,
            options.skip,
            options.limit,
        )

    # Wait for both reads; the first failure (find before count) is the one reported.
    outcomes = await asyncio.gather(
        collection.find(predicate, options),
        collection.count(predicate),
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            raise QueryExecutionError(f"Query execution failed on '{collection.name}'.") from outcome
        if isinstance(outcome, BaseException):
            raise outcome
    data, total = outcomes

    return PageResult(data=data, meta=build_meta(window.page, window.limit, total))
