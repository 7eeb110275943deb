"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.responses import ok

from . import dependencies, schemas, service

router = APIRouter(prefix="/api/auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest) -> dict:
    data = await service.register(payload)
    return ok(data, message="User registered successfully")


@router.post("/login")
async def login(payload: schemas.LoginRequest) -> dict:
    data = await service.login(payload)
    return ok(data, message="Login successful")


@router.get("/me")
async def me(current_user: dict = Depends(dependencies.get_current_user)) -> dict:
    return ok({"user": service.public_user(current_user)})


@router.put("/profile")
async def update_profile(
    payload: schemas.ProfileUpdateRequest,
    current_user: dict = Depends(dependencies.get_current_user),
) -> dict:
    user = await service.update_profile(current_user, payload)
    return ok({"user": user}, message="Profile updated successfully")


@router.post("/logout")
async def logout(_: dict = Depends(dependencies.get_current_user)) -> dict:
    # Tokens are stateless; the client drops its copy.
    return ok(message="Logout successful")


@router.post("/admin/register", status_code=status.HTTP_201_CREATED)
async def admin_register(payload: schemas.RegisterRequest) -> dict:
    data = await service.register(payload, role=service.ROLE_ADMIN)
    return ok(data, message="Admin registered successfully")


@router.post("/admin/login")
async def admin_login(payload: schemas.LoginRequest) -> dict:
    data = await service.login(payload, admin_only=True)
    return ok(data, message="Admin login successful")


@router.get("/admin/verify")
async def admin_verify(current_user: dict = Depends(dependencies.require_admin)) -> dict:
    return ok({"user": service.public_user(current_user)}, message="Admin token is valid")
