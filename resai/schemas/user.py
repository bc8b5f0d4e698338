from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from .base import ApiModel

RoleName = Literal["USER", "ADMIN"]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SignupRequest(ApiModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        email = value.strip().lower()
        if not _EMAIL_RE.match(email):
            raise ValueError("invalid email format")
        return email


class LoginRequest(ApiModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class LoginResponse(ApiModel):
    token: str
    token_type: str = "Bearer"
    email: str
    role: RoleName


class UsageView(ApiModel):
    period: str | None = None
    tailor_count: int = 0
    cover_letter_count: int = 0


class UserView(ApiModel):
    id: int
    email: str
    full_name: str | None = None
    role: RoleName
    premium_until: datetime | None = None
    is_premium: bool
    created_at: datetime


class MeResponse(ApiModel):
    id: int
    email: str
    role: RoleName
    is_premium: bool
    premium_until: datetime | None = None
    usage: UsageView


class ActivateCodeRequest(ApiModel):
    code: str = Field(min_length=1, max_length=40)


class ActivateCodeResponse(ApiModel):
    success: bool
    premium_until: datetime | None = None
