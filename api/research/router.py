"""
Research API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.params import ListParams, list_params
from core.responses import ok

from . import schemas, service

router = APIRouter(prefix="/api/research")


@router.get("")
async def list_research(
    params: ListParams = Depends(list_params),
    venue: str | None = Query(default=None, max_length=200),
    author: str | None = Query(default=None, max_length=100),
    year: int | None = Query(default=None, ge=1900, le=2999),
) -> dict:
    return await service.list_research(params, venue=venue, author=author, year=year)


@router.get("/stats/overview")
async def research_stats() -> dict:
    return ok(await service.stats())


@router.get("/status/{research_status}")
async def list_by_status(research_status: str, params: ListParams = Depends(list_params)) -> dict:
    return await service.list_by_status(research_status, params)


@router.get("/author/{author}")
async def list_by_author(author: str, params: ListParams = Depends(list_params)) -> dict:
    return await service.list_by_author(author, params)


@router.get("/{research_id}")
async def get_research(research_id: str) -> dict:
    return ok(await service.resource.get(research_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_research(
    payload: schemas.ResearchCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    research = await service.resource.create(payload.to_document(), user=current_user)
    return ok(research, message="Research created successfully")


@router.put("/{research_id}")
async def replace_research(
    research_id: str,
    payload: schemas.ResearchCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    research = await service.resource.update(research_id, payload.to_document(), user=current_user)
    return ok(research, message="Research updated successfully")


@router.patch("/{research_id}")
async def patch_research(
    research_id: str,
    payload: schemas.ResearchUpdate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    research = await service.resource.update(research_id, payload.to_document(partial=True), user=current_user)
    return ok(research, message="Research updated successfully")


@router.delete("/{research_id}")
async def delete_research(
    research_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.resource.delete(research_id, user=current_user)
    return ok(message="Research deleted successfully")
