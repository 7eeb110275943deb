"""
Pydantic schemas for achievement endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from core.schemas import DocumentModel, normalize_tags, not_in_future, reject_null

# Bare filename of an uploaded image, never a URL or path.
EVIDENCE_IMAGE_PATTERN = r"^([a-zA-Z0-9._-]+\.(?i:jpg|jpeg|png|gif|webp))?$"


class _AchievementRules(DocumentModel):
    @field_validator(
        "title", "description", "date", "organization", "evidence_image", "category", "tags",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)

    @field_validator("tags", check_fields=False)
    @classmethod
    def _tags(cls, value: list[str] | None) -> list[str] | None:
        return normalize_tags(value)

    @field_validator("date", check_fields=False)
    @classmethod
    def _date(cls, value: datetime | None) -> datetime | None:
        return not_in_future(value, "Achievement date")


class AchievementCreate(_AchievementRules):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    date: datetime
    organization: str = Field(default="", max_length=200)
    evidence_image: str = Field(default="", pattern=EVIDENCE_IMAGE_PATTERN)
    category: str = Field(default="", max_length=100)
    tags: list[str] = Field(default_factory=list)


class AchievementUpdate(_AchievementRules):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    date: datetime | None = None
    organization: str | None = Field(default=None, max_length=200)
    evidence_image: str | None = Field(default=None, pattern=EVIDENCE_IMAGE_PATTERN)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
