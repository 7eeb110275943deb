"""
Upload API endpoints.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status

from auth import dependencies as auth_dependencies
from core.responses import ok

from . import service

router = APIRouter(prefix="/api/upload")

authenticated = [Depends(auth_dependencies.get_current_user)]


def _base_url(request: Request) -> str:
    return str(request.base_url)


def _check_count(files: list[UploadFile] | None) -> list[UploadFile]:
    files = [f for f in (files or []) if f.filename]
    if len(files) > service.MAX_FILES_PER_FIELD:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files. Maximum is {service.MAX_FILES_PER_FIELD} files",
        )
    return files


@router.post("/image", dependencies=authenticated)
async def upload_image(request: Request, image: UploadFile | None = File(default=None)) -> dict:
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image file uploaded")

    stored = await service.store_upload(image, fieldname="image", kinds=(service.IMAGES,))
    return ok(stored.as_dict(_base_url(request)), message="Image uploaded successfully")


@router.post("/images", dependencies=authenticated)
async def upload_images(request: Request, images: list[UploadFile] | None = File(default=None)) -> dict:
    files = _check_count(images)
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image files uploaded")

    pending = [await service.prepare_upload(f, fieldname="images", kinds=(service.IMAGES,)) for f in files]
    base_url = _base_url(request)
    stored = [item.as_dict(base_url) for item in await service.store_uploads(pending)]
    return ok(stored, message=f"{len(stored)} images uploaded successfully")


@router.post("/pdf", dependencies=authenticated)
async def upload_pdf(request: Request, pdf: UploadFile | None = File(default=None)) -> dict:
    if pdf is None or not pdf.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No PDF file uploaded")

    stored = await service.store_upload(pdf, fieldname="pdf", kinds=(service.PDFS,))
    return ok(stored.as_dict(_base_url(request)), message="PDF uploaded successfully")


@router.post("/mixed", dependencies=authenticated)
async def upload_mixed(
    request: Request,
    images: list[UploadFile] | None = File(default=None),
    pdf: UploadFile | None = File(default=None),
) -> dict:
    image_files = _check_count(images)
    has_pdf = pdf is not None and bool(pdf.filename)
    if not image_files and not has_pdf:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")

    # Nothing is written until every file has passed validation.
    pending = [await service.prepare_upload(f, fieldname="images", kinds=(service.IMAGES,)) for f in image_files]
    if has_pdf:
        pending.append(await service.prepare_upload(pdf, fieldname="pdf", kinds=(service.PDFS,)))

    base_url = _base_url(request)
    result: dict[str, list[dict]] = {"images": [], "pdfs": []}
    for stored in await service.store_uploads(pending):
        result[stored.folder].append(stored.as_dict(base_url))

    return ok(result, message="Files uploaded successfully")


@router.get("/info/{filename}")
async def file_info(request: Request, filename: str) -> dict:
    info = service.file_info(filename, base_url=_base_url(request))
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return ok(info)


@router.get("/list", dependencies=authenticated)
async def list_files(
    request: Request,
    file_type: Literal["images", "pdfs"] | None = Query(default=None, alias="type"),
) -> dict:
    files, folders = service.list_files(file_type, base_url=_base_url(request))
    return ok({"files": files, "total": len(files), "directories": folders})


@router.delete("/{filename}", dependencies=authenticated)
async def delete_file(filename: str) -> dict:
    if not service.delete_file(filename):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return ok(message="File deleted successfully")
