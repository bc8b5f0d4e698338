from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resai.core.clock import usage_period, utc_now
from resai.core.config import settings
from resai.core.errors import DuplicateEmail, InvalidCredentials, NotFound, QuotaExceeded, ValidationError
from resai.core.security import create_access_token, hash_password, verify_password
from resai.models.user import Role, User

logger = logging.getLogger(__name__)

USAGE_FEATURES = {"tailor": "tailor_count", "cover_letter": "cover_letter_count"}


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == _normalize_email(email))).scalar_one_or_none()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def signup(db: Session, email: str, password: str) -> User:
    email = _normalize_email(email)
    if find_by_email(db, email) is not None:
        raise DuplicateEmail("Email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        auth_provider="LOCAL",
        role=Role.USER.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmail("Email already exists") from exc
    db.refresh(user)
    logger.info("user_signed_up user_id=%s", user.id)
    return user


def login(db: Session, email: str, password: str) -> tuple[str, User]:
    user = find_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_rejected")
        raise InvalidCredentials("Invalid credentials")
    return create_access_token(user.email), user


def extend_premium(user: User, days: int, *, now: datetime | None = None) -> datetime:
    """Append ``days`` to an unexpired premium window, or start a new one from now."""
    now = now or utc_now()
    if user.premium_until is not None and user.premium_until > now:
        user.premium_until = user.premium_until + timedelta(days=days)
    else:
        user.premium_until = now + timedelta(days=days)
    return user.premium_until


def _roll_usage_period(user: User) -> None:
    period = usage_period()
    if user.usage_period != period:
        user.usage_period = period
        user.tailor_count = 0
        user.cover_letter_count = 0


def current_usage(user: User) -> dict:
    if user.usage_period != usage_period():
        return {"period": usage_period(), "tailor_count": 0, "cover_letter_count": 0}
    return {
        "period": user.usage_period,
        "tailor_count": user.tailor_count or 0,
        "cover_letter_count": user.cover_letter_count or 0,
    }


def check_quota(user: User, feature: str) -> None:
    limit = settings.free_monthly_ai_limit
    if limit <= 0 or user.is_premium:
        return
    used = current_usage(user)[USAGE_FEATURES[feature]]
    if used >= limit:
        raise QuotaExceeded(f"Monthly free limit of {limit} reached. Activate an access code for premium.")


def record_usage(user: User, feature: str) -> None:
    """Bump the monthly counter for ``feature``; the caller commits."""
    _roll_usage_period(user)
    column = USAGE_FEATURES[feature]
    setattr(user, column, (getattr(user, column) or 0) + 1)


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.created_at.desc(), User.id.desc())).scalars())


def update_role(db: Session, user_id: int, role: str, *, acting_admin: User) -> User:
    user = get_user(db, user_id)
    if user.id == acting_admin.id:
        raise ValidationError("You cannot change your own role")
    user.role = Role(role).value
    db.commit()
    logger.info("user_role_updated admin_id=%s user_id=%s role=%s", acting_admin.id, user.id, user.role)
    return user


def grant_premium(db: Session, user_id: int, days: int, *, acting_admin: User) -> User:
    user = get_user(db, user_id)
    until = extend_premium(user, days)
    db.commit()
    logger.info("premium_granted admin_id=%s user_id=%s days=%s until=%s", acting_admin.id, user.id, days, until)
    return user


def revoke_premium(db: Session, user_id: int, *, acting_admin: User) -> User:
    user = get_user(db, user_id)
    user.premium_until = None
    db.commit()
    logger.info("premium_revoked admin_id=%s user_id=%s", acting_admin.id, user.id)
    return user


def count_users(db: Session) -> tuple[int, int]:
    total = db.execute(select(func.count(User.id))).scalar_one()
    premium = db.execute(select(func.count(User.id)).where(User.premium_until > utc_now())).scalar_one()
    return int(total), int(premium)


def seed_admin(db: Session, email: str, password: str) -> User:
    user = find_by_email(db, email)
    if user is None:
        user = User(email=_normalize_email(email), password_hash=hash_password(password), auth_provider="LOCAL")
        db.add(user)
    user.role = Role.ADMIN.value
    db.commit()
    db.refresh(user)
    logger.info("admin_seeded user_id=%s", user.id)
    return user
