from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.hash import pbkdf2_sha256
from sqlalchemy import select
from sqlalchemy.orm import Session

from resai.core.config import settings
from resai.core.errors import Forbidden, Unauthorized
from resai.db.session import get_db
from resai.models.user import User

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def create_access_token(subject: str, *, expires_delta: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + (expires_delta or timedelta(minutes=settings.jwt_expiration_minutes))
    payload: dict[str, Any] = {"sub": subject, "iat": issued_at, "exp": expires_at}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the token subject, raising Unauthorized for anything unusable."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token expired", code="token_expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token", code="invalid_token") from exc
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise Unauthorized("Invalid token", code="invalid_token")
    return subject


def resolve_principal(db: Session, token: str | None) -> User:
    if not token:
        raise Unauthorized("Missing bearer token")
    email = decode_access_token(token)
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        logger.info("principal_unknown_subject")
        raise Unauthorized("User not found")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return resolve_principal(db, token)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden("Admin access required")
    return user
