"""
Shared CRUD behaviour for the content resources (projects, achievements,
research).

Routers stay per-resource; they call a `ResourceService` configured with the
resource's collection, labels and default sort. Ownership rule for writes:
the creator or an admin.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from . import pagination, store
from .collection import Collection, Populate, Predicate
from .params import ListParams
from .query import build_projection, build_sort, is_valid_id

CREATED_BY = Populate(field="createdBy", collection=store.USERS, fields=("name", "email"))

Presenter = Callable[[dict[str, Any]], dict[str, Any]]


def _identity(document: dict[str, Any]) -> dict[str, Any]:
    return document


def is_admin(user: Mapping[str, Any]) -> bool:
    return str(user.get("role") or "") == "admin"


class ResourceService:
    def __init__(
        self,
        collection_name: str,
        *,
        singular: str,
        plural: str,
        default_sort: str,
        searchable_fields: tuple[str, ...],
        present: Presenter = _identity,
        schema: type[BaseModel] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.collection_name = collection_name
        self.singular = singular
        self.plural = plural
        self.default_sort = default_sort
        self.searchable_fields = searchable_fields
        self.present = present
        self.schema = schema
        self.logger = logger or logging.getLogger(__name__)

    def collection(self) -> Collection:
        return store.collection(self.collection_name)

    @contextmanager
    def server_errors(self, action: str, label: str | None = None) -> Iterator[None]:
        """
        Map store failures to a 500 naming the action, e.g.
        "Server error while fetching projects.".
        """
        try:
            yield
        except HTTPException:
            raise
        except Exception as exc:
            self.logger.exception("%s_failed collection=%s", action.replace(" ", "_"), self.collection_name)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Server error while {action} {label or self.plural}.",
            ) from exc

    def require_valid_id(self, document_id: str) -> None:
        if not is_valid_id(document_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid {self.singular} ID",
            )

    def _not_found(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{self.singular.capitalize()} not found",
        )

    async def list_page(
        self,
        params: ListParams,
        predicate: Predicate,
        *,
        label: str | None = None,
    ) -> dict[str, Any]:
        with self.server_errors("fetching", label):
            result = await pagination.execute_paginated_query(
                self.collection(),
                predicate,
                page=params.page,
                limit=params.limit,
                sort=build_sort(params.sort, self.default_sort),
                projection=build_projection(params.fields),
                populate=CREATED_BY,
                logger=self.logger,
            )
        self.logger.info(
            "%s_listed count=%s page=%s total=%s",
            self.plural,
            len(result.data),
            result.meta["page"],
            result.meta["total"],
        )
        return {
            "success": True,
            "data": [self.present(doc) for doc in result.data],
            "meta": result.meta,
        }

    async def get(self, document_id: str) -> dict[str, Any]:
        self.require_valid_id(document_id)
        with self.server_errors("fetching", self.singular):
            document = await self.collection().get(document_id, populate=CREATED_BY)
        if document is None:
            raise self._not_found()
        return self.present(document)

    async def create(self, payload: Mapping[str, Any], *, user: Mapping[str, Any]) -> dict[str, Any]:
        with self.server_errors("creating", self.singular):
            created = await self.collection().insert({**payload, "createdBy": str(user["id"])})
            document = await self.collection().get(created["id"], populate=CREATED_BY)
        self.logger.info("%s_created id=%s user=%s", self.singular, created["id"], user.get("email"))
        return self.present(document or created)

    async def _owned(self, document_id: str, user: Mapping[str, Any], action: str) -> dict[str, Any]:
        self.require_valid_id(document_id)
        with self.server_errors("fetching", self.singular):
            document = await self.collection().get(document_id)
        if document is None:
            raise self._not_found()

        owner = document.get("createdBy")
        if not is_admin(user) and (owner is None or str(owner) != str(user["id"])):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized to {action} this {self.singular}",
            )
        return document

    def check_merged(self, current: Mapping[str, Any], changes: Mapping[str, Any]) -> None:
        """
        Validate the document as it will be stored, so cross-field rules
        (e.g. endDate after startDate) also hold for partial updates.
        """
        if self.schema is None:
            return None
        try:
            self.schema.model_validate({**current, **changes})
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    async def update(
        self,
        document_id: str,
        changes: Mapping[str, Any],
        *,
        user: Mapping[str, Any],
    ) -> dict[str, Any]:
        current = await self._owned(document_id, user, "update")
        self.check_merged(current, changes)
        with self.server_errors("updating", self.singular):
            updated = await self.collection().update(document_id, changes)
            document = await self.collection().get(document_id, populate=CREATED_BY) if updated else None
        if document is None:
            raise self._not_found()
        self.logger.info("%s_updated id=%s user=%s", self.singular, document_id, user.get("email"))
        return self.present(document)

    async def delete(self, document_id: str, *, user: Mapping[str, Any]) -> None:
        await self._owned(document_id, user, "delete")
        with self.server_errors("deleting", self.singular):
            deleted = await self.collection().delete(document_id)
        if not deleted:
            raise self._not_found()
        self.logger.info("%s_deleted id=%s user=%s", self.singular, document_id, user.get("email"))
