"""
User listing for admins. Accounts are created through `auth/`.
"""

from __future__ import annotations

import logging
from typing import Any

from core import store
from core.collection import Equals
from core.params import ListParams
from core.query import build_query
from core.resources import ResourceService

logger = logging.getLogger(__name__)


def present(document: dict[str, Any]) -> dict[str, Any]:
    document.pop("passwordHash", None)
    return document


resource = ResourceService(
    store.USERS,
    singular="user",
    plural="users",
    default_sort="-createdAt",
    searchable_fields=("name", "email"),
    present=present,
    logger=logger,
)


async def list_users(params: ListParams, *, role: str | None = None) -> dict[str, Any]:
    predicate = build_query(params.filters(), resource.searchable_fields)
    # Users carry neither tags nor a status field.
    predicate.pop("tags", None)
    predicate.pop("status", None)
    if role:
        predicate["role"] = Equals(role)
    return await resource.list_page(params, predicate)
