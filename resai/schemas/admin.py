from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import ApiModel
from .resume import ResumeSummary
from .user import RoleName, UsageView, UserView


class GenerateCodeRequest(ApiModel):
    duration_days: int = Field(gt=0, le=3650)
    notes: str = Field(default="", max_length=500)


class GenerateBulkRequest(GenerateCodeRequest):
    count: int = Field(ge=1, le=100)


class AccessCodeView(ApiModel):
    id: int
    code: str
    duration_days: int
    is_used: bool
    used_by_user_id: int | None = None
    created_at: datetime
    activated_at: datetime | None = None
    expires_at: datetime | None = None
    notes: str | None = None


class GenerateCodeResponse(ApiModel):
    success: bool = True
    code: AccessCodeView


class GenerateBulkResponse(ApiModel):
    success: bool = True
    count: int
    codes: list[AccessCodeView]


class AdminUserView(UserView):
    usage: UsageView


class AdminUserDetail(ApiModel):
    user: AdminUserView
    is_premium: bool
    resume_count: int
    resumes: list[ResumeSummary]


class RoleUpdateRequest(ApiModel):
    role: RoleName


class GrantPremiumRequest(ApiModel):
    days: int = Field(gt=0, le=3650)


class UserMutationResponse(ApiModel):
    success: bool = True
    user: UserView


class UserStats(ApiModel):
    total: int
    premium: int
    free: int


class ResumeStats(ApiModel):
    total: int


class CodeStats(ApiModel):
    total: int
    used: int
    unused: int
    recent: int


class StatsResponse(ApiModel):
    users: UserStats
    resumes: ResumeStats
    codes: CodeStats
