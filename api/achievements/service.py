"""
Achievement business logic.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from core import store
from core.collection import FindOptions, Predicate, Range, parse_datetime, utc_now
from core.params import ListParams
from core.query import build_query, contains_filter
from core.resources import ResourceService

from .schemas import AchievementCreate

logger = logging.getLogger(__name__)


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    days = int(abs(((now or utc_now()) - moment).total_seconds()) // 86400)
    if days < 30:
        return f"{days} days ago"
    if days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''} ago"
    years = days // 365
    return f"{years} year{'s' if years > 1 else ''} ago"


def present(document: dict[str, Any]) -> dict[str, Any]:
    moment = parse_datetime(document.get("date"))
    if moment is not None:
        document["timeAgo"] = time_ago(moment)
    return document


resource = ResourceService(
    store.ACHIEVEMENTS,
    singular="achievement",
    plural="achievements",
    default_sort="-date",
    searchable_fields=("title", "description"),
    present=present,
    schema=AchievementCreate,
    logger=logger,
)


async def list_achievements(
    params: ListParams,
    *,
    category: str | None = None,
    organization: str | None = None,
) -> dict[str, Any]:
    # Achievements have no status; only text and tags come from the shared filters.
    predicate = build_query(
        params.filters(category=category, organization=organization),
        resource.searchable_fields,
    )
    predicate.pop("status", None)
    for field_name, value in (("category", category), ("organization", organization)):
        condition = contains_filter(value)
        if condition is not None:
            predicate[field_name] = condition
    return await resource.list_page(params, predicate)


async def list_by_category(category: str, params: ListParams) -> dict[str, Any]:
    predicate: Predicate = {}
    condition = contains_filter(category)
    if condition is not None:
        predicate["category"] = condition
    return await resource.list_page(params, predicate, label="achievements by category")


async def stats() -> dict[str, Any]:
    collection = resource.collection()
    year_start = datetime(utc_now().year, 1, 1, tzinfo=timezone.utc)
    with resource.server_errors("fetching", "achievement statistics"):
        total, categories, organizations, this_year, rows = await asyncio.gather(
            collection.count({}),
            collection.distinct("category"),
            collection.distinct("organization"),
            collection.count({"date": Range(gte=year_start)}),
            collection.find({}, FindOptions(projection=frozenset({"category"}))),
        )

    counts = Counter(row.get("category") or None for row in rows)
    breakdown = [{"category": category, "count": count} for category, count in counts.most_common()]
    return {
        "total": total,
        "categories": categories,
        "organizations": organizations,
        "thisYear": this_year,
        "categoryBreakdown": breakdown,
    }
