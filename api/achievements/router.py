"""
Achievement API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.params import ListParams, list_params
from core.responses import ok

from . import schemas, service

router = APIRouter(prefix="/api/achievements")


@router.get("")
async def list_achievements(
    params: ListParams = Depends(list_params),
    category: str | None = Query(default=None, max_length=100),
    organization: str | None = Query(default=None, max_length=200),
) -> dict:
    return await service.list_achievements(params, category=category, organization=organization)


@router.get("/stats/overview")
async def achievement_stats() -> dict:
    return ok(await service.stats())


@router.get("/category/{category}")
async def list_by_category(category: str, params: ListParams = Depends(list_params)) -> dict:
    return await service.list_by_category(category, params)


@router.get("/{achievement_id}")
async def get_achievement(achievement_id: str) -> dict:
    return ok(await service.resource.get(achievement_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_achievement(
    payload: schemas.AchievementCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    achievement = await service.resource.create(payload.to_document(), user=current_user)
    return ok(achievement, message="Achievement created successfully")


@router.put("/{achievement_id}")
async def replace_achievement(
    achievement_id: str,
    payload: schemas.AchievementCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    achievement = await service.resource.update(achievement_id, payload.to_document(), user=current_user)
    return ok(achievement, message="Achievement updated successfully")


@router.patch("/{achievement_id}")
async def patch_achievement(
    achievement_id: str,
    payload: schemas.AchievementUpdate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    achievement = await service.resource.update(
        achievement_id,
        payload.to_document(partial=True),
        user=current_user,
    )
    return ok(achievement, message="Achievement updated successfully")


@router.delete("/{achievement_id}")
async def delete_achievement(
    achievement_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.resource.delete(achievement_id, user=current_user)
    return ok(message="Achievement deleted successfully")
