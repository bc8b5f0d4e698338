from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from resai.core.errors import ValidationError
from resai.core.security import require_admin
from resai.db.session import get_db
from resai.models.user import User
from resai.schemas.admin import (
    AccessCodeView,
    AdminUserDetail,
    AdminUserView,
    CodeStats,
    GenerateBulkRequest,
    GenerateCodeRequest,
    GenerateBulkResponse,
    GenerateCodeResponse,
    GrantPremiumRequest,
    ResumeStats,
    RoleUpdateRequest,
    StatsResponse,
    UserMutationResponse,
    UserStats,
)
from resai.schemas.resume import ResumeSummary
from resai.schemas.user import UsageView, UserView
from resai.services import access_code_service, resume_service, user_service

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


def _admin_user_view(user: User) -> AdminUserView:
    return AdminUserView(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        premium_until=user.premium_until,
        is_premium=user.is_premium,
        created_at=user.created_at,
        usage=UsageView(**user_service.current_usage(user)),
    )


@router.post("/codes/generate", response_model=GenerateCodeResponse)
def generate_code(payload: GenerateCodeRequest, db: Session = Depends(get_db)):
    access_code = access_code_service.generate(db, payload.duration_days, payload.notes)
    return GenerateCodeResponse(code=AccessCodeView.model_validate(access_code))


@router.post("/codes/generate-bulk", response_model=GenerateBulkResponse)
def generate_bulk(payload: GenerateBulkRequest, db: Session = Depends(get_db)):
    codes = access_code_service.generate_bulk(db, payload.count, payload.duration_days, payload.notes)
    return GenerateBulkResponse(count=len(codes), codes=[AccessCodeView.model_validate(c) for c in codes])


@router.get("/codes", response_model=list[AccessCodeView])
def list_codes(db: Session = Depends(get_db)):
    return access_code_service.list_all(db)


@router.get("/codes/unused", response_model=list[AccessCodeView])
def list_unused_codes(db: Session = Depends(get_db)):
    return access_code_service.list_unused(db)


@router.get("/codes/used", response_model=list[AccessCodeView])
def list_used_codes(db: Session = Depends(get_db)):
    return access_code_service.list_used(db)


@router.delete("/codes/{code_id}")
def delete_code(code_id: int, db: Session = Depends(get_db)):
    if not access_code_service.delete(db, code_id):
        raise ValidationError("Access code not found or already used", code="access_code_not_deletable")
    return {"success": True}


@router.get("/users", response_model=list[AdminUserView])
def list_users(db: Session = Depends(get_db)):
    return [_admin_user_view(user) for user in user_service.list_users(db)]


@router.get("/users/{user_id}", response_model=AdminUserDetail)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user(db, user_id)
    resumes = resume_service.list_for_user(db, user.id)
    return AdminUserDetail(
        user=_admin_user_view(user),
        is_premium=user.is_premium,
        resume_count=len(resumes),
        resumes=[ResumeSummary.model_validate(resume) for resume in resumes],
    )


@router.put("/users/{user_id}/role", response_model=UserMutationResponse)
def update_role(
    user_id: int,
    payload: RoleUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = user_service.update_role(db, user_id, payload.role, acting_admin=admin)
    return UserMutationResponse(user=UserView.model_validate(user))


@router.post("/users/{user_id}/grant-premium", response_model=UserMutationResponse)
def grant_premium(
    user_id: int,
    payload: GrantPremiumRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = user_service.grant_premium(db, user_id, payload.days, acting_admin=admin)
    return UserMutationResponse(user=UserView.model_validate(user))


@router.post("/users/{user_id}/revoke-premium", response_model=UserMutationResponse)
def revoke_premium(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = user_service.revoke_premium(db, user_id, acting_admin=admin)
    return UserMutationResponse(user=UserView.model_validate(user))


@router.get("/stats", response_model=StatsResponse)
def stats(db: Session = Depends(get_db)):
    total, premium = user_service.count_users(db)
    return StatsResponse(
        users=UserStats(total=total, premium=premium, free=total - premium),
        resumes=ResumeStats(total=resume_service.count_all(db)),
        codes=CodeStats(**access_code_service.statistics(db)),
    )
