"""
Project business logic: list filters, derived fields and stats.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from core import store
from core.collection import Equals, parse_datetime
from core.params import ListParams
from core.query import build_query
from core.resources import ResourceService

from .schemas import ProjectCreate

logger = logging.getLogger(__name__)


def present(document: dict[str, Any]) -> dict[str, Any]:
    """
    Add `duration` (whole days, rounded up) when both dates are set.
    """
    start = parse_datetime(document.get("startDate"))
    end = parse_datetime(document.get("endDate"))
    if "startDate" in document or "endDate" in document:
        document["duration"] = (
            math.ceil(abs((end - start).total_seconds()) / 86400) if start and end else None
        )
    return document


resource = ResourceService(
    store.PROJECTS,
    singular="project",
    plural="projects",
    default_sort="-createdAt",
    searchable_fields=("title", "description"),
    present=present,
    schema=ProjectCreate,
    logger=logger,
)


async def list_projects(params: ListParams) -> dict[str, Any]:
    predicate = build_query(params.filters(), resource.searchable_fields)
    return await resource.list_page(params, predicate)


async def stats() -> dict[str, Any]:
    collection = resource.collection()
    with resource.server_errors("fetching", "project statistics"):
        total, completed, in_progress, ideas = await asyncio.gather(
            collection.count({}),
            collection.count({"status": Equals("completed")}),
            collection.count({"status": Equals("in-progress")}),
            collection.count({"status": Equals("idea")}),
        )
    return {
        "total": total,
        "completed": completed,
        "inProgress": in_progress,
        "ideas": ideas,
    }
