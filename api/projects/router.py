"""
Project API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth import dependencies as auth_dependencies
from core.params import ListParams, list_params
from core.responses import ok

from . import schemas, service

router = APIRouter(prefix="/api/projects")


@router.get("")
async def list_projects(params: ListParams = Depends(list_params)) -> dict:
    return await service.list_projects(params)


@router.get("/stats/overview")
async def project_stats() -> dict:
    return ok(await service.stats())


@router.get("/{project_id}")
async def get_project(project_id: str) -> dict:
    return ok(await service.resource.get(project_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: schemas.ProjectCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    project = await service.resource.create(payload.to_document(), user=current_user)
    return ok(project, message="Project created successfully")


@router.put("/{project_id}")
async def replace_project(
    project_id: str,
    payload: schemas.ProjectCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    project = await service.resource.update(project_id, payload.to_document(), user=current_user)
    return ok(project, message="Project updated successfully")


@router.patch("/{project_id}")
async def patch_project(
    project_id: str,
    payload: schemas.ProjectUpdate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    project = await service.resource.update(project_id, payload.to_document(partial=True), user=current_user)
    return ok(project, message="Project updated successfully")


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.resource.delete(project_id, user=current_user)
    return ok(message="Project deleted successfully")
