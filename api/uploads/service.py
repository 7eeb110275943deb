"""
Upload "service layer".

Independent of FastAPI's routing layer:
- validate uploads (type + extension)
- read file bytes with a size limit
- store under UPLOAD_PATH/images or UPLOAD_PATH/pdfs with a unique name
- look up, list and delete stored files
"""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
PDF_TYPE = "application/pdf"

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

IMAGES = "images"
PDFS = "pdfs"
TEMP = "temp"
FOLDERS = (IMAGES, PDFS, TEMP)
LISTED_FOLDERS = (IMAGES, PDFS)

MAX_FILES_PER_FIELD = 5

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB


@dataclass(frozen=True)
class StoredFile:
    fieldname: str
    originalname: str
    filename: str
    mimetype: str
    size: int
    folder: str

    def as_dict(self, base_url: str) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "originalname": self.originalname,
            "url": file_url(base_url, self.folder, self.filename),
            "size": self.size,
            "mimetype": self.mimetype,
        }


def upload_root() -> Path:
    return Path(os.environ.get("UPLOAD_PATH", "").strip() or "./uploads")


def ensure_upload_dirs() -> None:
    for folder in FOLDERS:
        (upload_root() / folder).mkdir(parents=True, exist_ok=True)


def max_upload_bytes_from_env() -> int:
    """
    Read MAX_FILE_SIZE from env, falling back to 10 MiB.
    """
    raw = os.environ.get("MAX_FILE_SIZE", "").strip()
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES

    try:
        value = int(raw)
    except ValueError:
        raise HTTPException(
            status_code=500,
            detail="Invalid MAX_FILE_SIZE. It must be an integer.",
        )

    if value <= 0:
        raise HTTPException(
            status_code=500,
            detail="Invalid MAX_FILE_SIZE. It must be > 0.",
        )

    return value


def file_url(base_url: str, folder: str, filename: str) -> str:
    path = f"uploads/{folder}/{filename}" if folder and folder != TEMP else f"uploads/{filename}"
    return f"{base_url.rstrip('/')}/{path}"


def _allowed_types(kinds: tuple[str, ...]) -> list[str]:
    allowed: list[str] = []
    if IMAGES in kinds:
        allowed.extend(IMAGE_TYPES)
    if PDFS in kinds:
        allowed.append(PDF_TYPE)
    return allowed


def validate_upload(file: UploadFile, *, kinds: tuple[str, ...]) -> tuple[str, str]:
    """
    Return (folder, extension) if this upload is acceptable.

    The content type decides the folder; the extension must agree with it.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Missing filename.")

    content_type = (file.content_type or "").lower()
    allowed = _allowed_types(kinds)
    if content_type not in allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed types: {', '.join(allowed)}",
        )

    ext = Path(file.filename).suffix.lower()
    if content_type == PDF_TYPE:
        if ext != ".pdf":
            raise HTTPException(status_code=400, detail=f"Unsupported file extension '{ext}' for a PDF.")
        return PDFS, ext

    if not ext:
        ext = IMAGE_TYPES[content_type]
    if ext not in IMAGE_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported file extension '{ext}' for an image.")
    return IMAGES, ext


def _format_size(num_bytes: int) -> str:
    mib = 1024 * 1024
    return f"{num_bytes // mib}MB" if num_bytes >= mib else f"{num_bytes} bytes"


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum size is {_format_size(max_bytes)}",
            )

    return bytes(buf)


def unique_filename(fieldname: str, ext: str) -> str:
    millis = int(time.time() * 1000)
    return f"{fieldname}-{millis}-{secrets.randbelow(10**9)}{ext}"


@dataclass(frozen=True)
class PendingUpload:
    """A validated upload held in memory, not yet written to disk."""

    fieldname: str
    originalname: str
    mimetype: str
    folder: str
    ext: str
    data: bytes


async def prepare_upload(file: UploadFile, *, fieldname: str, kinds: tuple[str, ...]) -> PendingUpload:
    folder, ext = validate_upload(file, kinds=kinds)
    data = await read_upload_bytes(file, max_bytes=max_upload_bytes_from_env())
    return PendingUpload(
        fieldname=fieldname,
        originalname=file.filename or "",
        mimetype=(file.content_type or "").lower(),
        folder=folder,
        ext=ext,
        data=data,
    )


async def write_upload(pending: PendingUpload) -> StoredFile:
    filename = unique_filename(pending.fieldname, pending.ext)
    target = upload_root() / pending.folder / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_bytes, pending.data)

    logger.info("file_stored filename=%s folder=%s size=%s", filename, pending.folder, len(pending.data))
    return StoredFile(
        fieldname=pending.fieldname,
        originalname=pending.originalname,
        filename=filename,
        mimetype=pending.mimetype,
        size=len(pending.data),
        folder=pending.folder,
    )


async def store_uploads(pending: list[PendingUpload]) -> list[StoredFile]:
    """
    Write a batch that has already passed validation as a whole.
    """
    return [await write_upload(item) for item in pending]


async def store_upload(file: UploadFile, *, fieldname: str, kinds: tuple[str, ...]) -> StoredFile:
    return await write_upload(await prepare_upload(file, fieldname=fieldname, kinds=kinds))


def check_filename(filename: str) -> str:
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")
    return filename


def locate(filename: str) -> tuple[Path, str] | None:
    check_filename(filename)
    for folder in FOLDERS:
        path = upload_root() / folder / filename
        if path.is_file():
            return path, folder
    return None


def _timestamp(epoch_s: float) -> str:
    return datetime.fromtimestamp(epoch_s, tz=timezone.utc).isoformat()


def _describe(path: Path, folder: str, base_url: str) -> dict[str, Any]:
    stats = path.stat()
    return {
        "filename": path.name,
        "type": folder.rstrip("s"),
        "size": stats.st_size,
        "created": _timestamp(stats.st_ctime),
        "modified": _timestamp(stats.st_mtime),
        "url": file_url(base_url, folder, path.name),
    }


def file_info(filename: str, *, base_url: str) -> dict[str, Any] | None:
    found = locate(filename)
    if found is None:
        return None
    path, folder = found
    return _describe(path, folder, base_url)


def delete_file(filename: str) -> bool:
    found = locate(filename)
    if found is None:
        return False
    path, _ = found
    path.unlink(missing_ok=True)
    logger.info("file_deleted path=%s", path)
    return True


def list_files(file_type: str | None, *, base_url: str) -> tuple[list[dict[str, Any]], list[str]]:
    folders = [file_type] if file_type in LISTED_FOLDERS else list(LISTED_FOLDERS)
    files: list[dict[str, Any]] = []
    for folder in folders:
        directory = upload_root() / folder
        if not directory.is_dir():
            continue
        for path in directory.iterdir():
            if path.is_file():
                files.append(_describe(path, folder, base_url))

    files.sort(key=lambda item: item["created"], reverse=True)
    return files, folders
