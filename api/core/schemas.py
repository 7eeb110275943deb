"""
Pydantic base for resource request bodies.

Python code uses snake_case; documents and the JSON API use camelCase
(`repo_url` <-> `repoUrl`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .collection import as_utc, utc_now

URL_OR_EMPTY_PATTERN = r"^(https?://.+)?$"


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_document(self, *, partial: bool = False) -> dict[str, Any]:
        """
        Fields as stored. `partial=True` keeps only what the client sent.
        """
        return self.model_dump(by_alias=True, exclude_unset=partial)


def normalize_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned = (tag.strip().lower() for tag in tags)
    return list(dict.fromkeys(tag for tag in cleaned if tag))


def reject_null(value: Any) -> Any:
    """
    Partial updates may omit a field but may not clear it with `null`.
    """
    if value is None:
        raise ValueError("Field cannot be null")
    return value


def not_in_future(value: datetime | None, label: str) -> datetime | None:
    if value is not None and as_utc(value) > utc_now():
        raise ValueError(f"{label} cannot be in the future")
    return value
