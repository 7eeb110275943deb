"""
User API endpoints (admin only).
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.params import ListParams, list_params
from core.responses import ok

from . import service

router = APIRouter(prefix="/api/users", dependencies=[Depends(auth_dependencies.require_admin)])


@router.get("")
async def list_users(
    params: ListParams = Depends(list_params),
    role: Literal["user", "admin"] | None = Query(default=None),
) -> dict:
    return await service.list_users(params, role=role)


@router.get("/{user_id}")
async def get_user(user_id: str) -> dict:
    return ok(await service.resource.get(user_id))
