from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from resai.core.errors import ValidationError
from resai.core.security import get_current_user
from resai.db.session import get_db
from resai.models.user import User
from resai.schemas.user import (
    ActivateCodeRequest,
    ActivateCodeResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SignupRequest,
    UsageView,
    UserView,
)
from resai.services import access_code_service, user_service

router = APIRouter(prefix="/users")


@router.post("/signup", response_model=UserView, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    user = user_service.signup(db, payload.email, payload.password)
    return UserView.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token, user = user_service.login(db, payload.email, payload.password)
    return LoginResponse(token=token, email=user.email, role=user.role)


@router.get("/me", response_model=MeResponse)
def me(user: User = Depends(get_current_user)):
    return MeResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        is_premium=user.is_premium,
        premium_until=user.premium_until,
        usage=UsageView(**user_service.current_usage(user)),
    )


@router.post("/activate-code", response_model=ActivateCodeResponse)
def activate_code(
    payload: ActivateCodeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not access_code_service.activate(db, payload.code, user.id):
        raise ValidationError("Invalid or already used access code", code="invalid_access_code")
    db.refresh(user)
    return ActivateCodeResponse(success=True, premium_until=user.premium_until)
