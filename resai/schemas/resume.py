from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from .base import ApiModel

ResumeLanguage = Literal["en", "fr"]


class ResumeCreate(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    data: dict[str, Any]
    ai_metadata: dict[str, Any] | None = None
    language: ResumeLanguage = "en"


class ResumeUpdate(ApiModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = Field(default=None, max_length=255)
    data: dict[str, Any] | None = None
    ai_metadata: dict[str, Any] | None = None


class ResumeView(ApiModel):
    id: int
    title: str
    data: dict[str, Any]
    ai_metadata: dict[str, Any] | None = None
    version: int
    language: str
    created_at: datetime
    updated_at: datetime


class ResumeSummary(ApiModel):
    id: int
    title: str
    version: int
    updated_at: datetime


class JobDescriptionRequest(ApiModel):
    job_description: str = Field(min_length=1, max_length=20000)


class CoverLetterResponse(ApiModel):
    success: bool = True
    resume_id: int
    cover_letter: str
