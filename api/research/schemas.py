"""
Pydantic schemas for research endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, field_validator

from core.schemas import DocumentModel, normalize_tags, not_in_future, reject_null

ResearchStatus = Literal["draft", "submitted", "published"]
RESEARCH_STATUSES: tuple[str, ...] = ("draft", "submitted", "published")

DOI_PATTERN = r"^(10\.\d{4,}/[-._;()/:a-zA-Z0-9]+)?$"
# Remote URL or a PDF served from our own uploads folder.
PDF_URL_PATTERN = r"^(https?://.+|/uploads/.+\.pdf)?$"

Author = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class _ResearchRules(DocumentModel):
    @field_validator(
        "title", "abstract", "authors", "venue", "doi", "pdf_url", "tags", "status",
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

    @field_validator("published_date", check_fields=False)
    @classmethod
    def _published_date(cls, value: datetime | None) -> datetime | None:
        return not_in_future(value, "Published date")


class ResearchCreate(_ResearchRules):
    title: str = Field(..., min_length=1, max_length=300)
    abstract: str = Field(default="", max_length=5000)
    authors: list[Author] = Field(..., min_length=1)
    published_date: datetime | None = None
    venue: str = Field(default="", max_length=200)
    doi: str = Field(default="", pattern=DOI_PATTERN)
    pdf_url: str = Field(default="", pattern=PDF_URL_PATTERN)
    tags: list[str] = Field(default_factory=list)
    status: ResearchStatus = "draft"


class ResearchUpdate(_ResearchRules):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    abstract: str | None = Field(default=None, max_length=5000)
    authors: list[Author] | None = Field(default=None, min_length=1)
    published_date: datetime | None = None
    venue: str | None = Field(default=None, max_length=200)
    doi: str | None = Field(default=None, pattern=DOI_PATTERN)
    pdf_url: str | None = Field(default=None, pattern=PDF_URL_PATTERN)
    tags: list[str] | None = None
    status: ResearchStatus | None = None
