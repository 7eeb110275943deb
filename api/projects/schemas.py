"""
Pydantic schemas for project endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator, model_validator

from core.collection import as_utc
from core.schemas import URL_OR_EMPTY_PATTERN, DocumentModel, normalize_tags, reject_null

ProjectStatus = Literal["idea", "in-progress", "completed"]


class _ProjectRules(DocumentModel):
    @field_validator(
        "title", "description", "tags", "status", "repo_url", "live_url", "images", "contributors",
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

    @model_validator(mode="after")
    def _end_after_start(self):
        start, end = getattr(self, "start_date", None), getattr(self, "end_date", None)
        if start is not None and end is not None and as_utc(end) < as_utc(start):
            raise ValueError("End date must be after start date")
        return self


class ProjectCreate(_ProjectRules):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    tags: list[str] = Field(default_factory=list)
    status: ProjectStatus = "idea"
    repo_url: str = Field(default="", pattern=URL_OR_EMPTY_PATTERN)
    live_url: str = Field(default="", pattern=URL_OR_EMPTY_PATTERN)
    images: list[str] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    contributors: list[EmailStr] = Field(default_factory=list)


class ProjectUpdate(_ProjectRules):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    tags: list[str] | None = None
    status: ProjectStatus | None = None
    repo_url: str | None = Field(default=None, pattern=URL_OR_EMPTY_PATTERN)
    live_url: str | None = Field(default=None, pattern=URL_OR_EMPTY_PATTERN)
    images: list[str] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    contributors: list[EmailStr] | None = None
