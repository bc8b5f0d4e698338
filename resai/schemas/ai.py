from __future__ import annotations

from pydantic import Field

from .base import ApiModel


class AiRequest(ApiModel):
    user_input: str = Field(min_length=1, max_length=8000)
    context: dict[str, str] | None = None
    language: str | None = "en"


class AiResponse(ApiModel):
    success: bool
    generated_text: str | None = None
