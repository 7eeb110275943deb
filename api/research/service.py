"""
Research business logic.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status

from core import store
from core.collection import Equals, FindOptions, Predicate, Range, parse_datetime, utc_now
from core.params import ListParams
from core.query import build_query, contains_filter, year_range
from core.resources import ResourceService

from .schemas import RESEARCH_STATUSES, ResearchCreate

logger = logging.getLogger(__name__)

YEARLY_BREAKDOWN_YEARS = 5


def citation(document: dict[str, Any]) -> str:
    """
    APA-style: "A, B (2023). Title. Venue. https://doi.org/..."
    """
    authors = ", ".join(document.get("authors") or [])
    published = parse_datetime(document.get("publishedDate"))
    year = published.year if published else "n.d."
    venue = f". {document['venue']}" if document.get("venue") else ""
    doi = f". https://doi.org/{document['doi']}" if document.get("doi") else ""
    return f"{authors} ({year}). {document.get('title', '')}{venue}{doi}"


def present(document: dict[str, Any]) -> dict[str, Any]:
    if "publishedDate" in document:
        published = parse_datetime(document.get("publishedDate"))
        document["publicationYear"] = published.year if published else None
    if "title" in document and "authors" in document:
        document["citation"] = citation(document)
    return document


resource = ResourceService(
    store.RESEARCH,
    singular="research",
    plural="research",
    default_sort="-publishedDate",
    searchable_fields=("title", "abstract"),
    present=present,
    schema=ResearchCreate,
    logger=logger,
)


async def list_research(
    params: ListParams,
    *,
    venue: str | None = None,
    author: str | None = None,
    year: int | None = None,
) -> dict[str, Any]:
    predicate = build_query(
        params.filters(venue=venue, author=author, year=year),
        resource.searchable_fields,
    )
    venue_condition = contains_filter(venue)
    if venue_condition is not None:
        predicate["venue"] = venue_condition
    author_condition = contains_filter(author)
    if author_condition is not None:
        predicate["authors"] = author_condition
    if year is not None:
        predicate["publishedDate"] = year_range(year)
    return await resource.list_page(params, predicate)


async def list_by_status(research_status: str, params: ListParams) -> dict[str, Any]:
    if research_status not in RESEARCH_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid status. Must be draft, submitted, or published",
        )
    predicate: Predicate = {"status": Equals(research_status)}
    return await resource.list_page(params, predicate, label="research by status")


async def list_by_author(author: str, params: ListParams) -> dict[str, Any]:
    predicate: Predicate = {}
    condition = contains_filter(author)
    if condition is not None:
        predicate["authors"] = condition
    return await resource.list_page(params, predicate, label="research by author")


async def stats() -> dict[str, Any]:
    collection = resource.collection()
    year_start = datetime(utc_now().year, 1, 1, tzinfo=timezone.utc)
    with resource.server_errors("fetching", "research statistics"):
        total, published, submitted, drafts, venues, this_year, rows = await asyncio.gather(
            collection.count({}),
            collection.count({"status": Equals("published")}),
            collection.count({"status": Equals("submitted")}),
            collection.count({"status": Equals("draft")}),
            collection.distinct("venue"),
            collection.count({"publishedDate": Range(gte=year_start)}),
            collection.find({}, FindOptions(projection=frozenset({"publishedDate"}))),
        )

    years = Counter(
        moment.year
        for moment in (parse_datetime(row.get("publishedDate")) for row in rows)
        if moment is not None
    )
    yearly = [
        {"year": year, "count": years[year]}
        for year in sorted(years, reverse=True)[:YEARLY_BREAKDOWN_YEARS]
    ]
    return {
        "total": total,
        "published": published,
        "submitted": submitted,
        "drafts": drafts,
        "venues": venues,
        "thisYear": this_year,
        "yearlyBreakdown": yearly,
    }
