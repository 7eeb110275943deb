"""
Query-string parsing for list endpoints.

FastAPI validates and types the raw query here, before anything reaches the
query/pagination core. Out-of-range values are rejected with 400 by the
validation handler in `core/responses.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import Query

from .pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from .query import FilterRequest

SORT_PATTERN = r"^-?[A-Za-z_][A-Za-z0-9_]*$"


@dataclass(frozen=True)
class ListParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort: str | None = None
    q: str | None = None
    tags: str | None = None
    status: str | None = None
    fields: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    def filters(self, **extra) -> FilterRequest:
        return FilterRequest(
            text_query=self.q,
            tags=self.tags,
            status=self.status,
            start_date=self.start_date,
            end_date=self.end_date,
            **extra,
        )


async def list_params(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    sort: str | None = Query(default=None, pattern=SORT_PATTERN, max_length=100),
    q: str | None = Query(default=None, max_length=200),
    tags: str | None = Query(default=None, max_length=500),
    status: str | None = Query(default=None, max_length=50),
    fields: str | None = Query(default=None, max_length=500),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> ListParams:
    return ListParams(
        page=page,
        limit=limit,
        sort=sort,
        q=(q or "").strip() or None,
        tags=(tags or "").strip() or None,
        status=(status or "").strip() or None,
        fields=(fields or "").strip() or None,
        start_date=start_date,
        end_date=end_date,
    )
