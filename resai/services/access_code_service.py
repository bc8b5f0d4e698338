from __future__ import annotations

import logging
import secrets
import string
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from resai.core.clock import utc_now
from resai.core.errors import ValidationError
from resai.models.access_code import AccessCode
from resai.models.user import User
from resai.services.user_service import extend_premium

logger = logging.getLogger(__name__)

CODE_PREFIX = "RES"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_GROUP_LENGTH = 4
MAX_BULK_COUNT = 100
RECENT_WINDOW_DAYS = 30


def _random_code() -> str:
    groups = [
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_LENGTH))
        for _ in range(2)
    ]
    return "-".join([CODE_PREFIX, *groups])


def _code_exists(db: Session, code: str) -> bool:
    return db.execute(select(AccessCode.id).where(AccessCode.code == code)).first() is not None


def _unused_code(db: Session, pending: set[str]) -> str:
    while True:
        code = _random_code()
        if code not in pending and not _code_exists(db, code):
            return code


def _new_code(db: Session, duration_days: int, notes: str | None, pending: set[str]) -> AccessCode:
    code = _unused_code(db, pending)
    pending.add(code)
    access_code = AccessCode(code=code, duration_days=duration_days, is_used=False, notes=notes or "")
    db.add(access_code)
    return access_code


def generate(db: Session, duration_days: int, notes: str | None = "") -> AccessCode:
    access_code = _new_code(db, duration_days, notes, set())
    db.commit()
    db.refresh(access_code)
    logger.info("access_code_generated code_id=%s duration_days=%s", access_code.id, duration_days)
    return access_code


def generate_bulk(db: Session, count: int, duration_days: int, notes: str | None = "") -> list[AccessCode]:
    if count < 1 or count > MAX_BULK_COUNT:
        raise ValidationError(f"Count must be between 1 and {MAX_BULK_COUNT}")
    pending: set[str] = set()
    codes = [_new_code(db, duration_days, notes, pending) for _ in range(count)]
    db.commit()
    for access_code in codes:
        db.refresh(access_code)
    logger.info("access_codes_generated count=%s duration_days=%s", count, duration_days)
    return codes


def find_by_code(db: Session, code: str) -> AccessCode | None:
    normalized = (code or "").strip().upper()
    if not normalized:
        return None
    return db.execute(select(AccessCode).where(AccessCode.code == normalized)).scalar_one_or_none()


def activate(db: Session, code: str, user_id: int) -> bool:
    """Redeem ``code`` for ``user_id``; False when the code is unknown, spent, or the user is gone."""
    access_code = find_by_code(db, code)
    if access_code is None:
        logger.info("access_code_rejected reason=unknown user_id=%s", user_id)
        return False
    if access_code.is_used:
        logger.info("access_code_rejected reason=used code_id=%s user_id=%s", access_code.id, user_id)
        return False
    user = db.get(User, user_id)
    if user is None:
        logger.info("access_code_rejected reason=unknown_user user_id=%s", user_id)
        return False

    now = utc_now()
    access_code.is_used = True
    access_code.used_by_user_id = user.id
    access_code.activated_at = now
    access_code.expires_at = now + timedelta(days=access_code.duration_days)
    until = extend_premium(user, access_code.duration_days, now=now)
    db.commit()
    logger.info("access_code_activated code_id=%s user_id=%s premium_until=%s", access_code.id, user.id, until)
    return True


def delete(db: Session, code_id: int) -> bool:
    access_code = db.get(AccessCode, code_id)
    if access_code is None or access_code.is_used:
        return False
    db.delete(access_code)
    db.commit()
    logger.info("access_code_deleted code_id=%s", code_id)
    return True


def list_all(db: Session) -> list[AccessCode]:
    return list(db.execute(select(AccessCode).order_by(AccessCode.created_at.desc(), AccessCode.id.desc())).scalars())


def list_unused(db: Session) -> list[AccessCode]:
    stmt = (
        select(AccessCode)
        .where(AccessCode.is_used.is_(False))
        .order_by(AccessCode.created_at.desc(), AccessCode.id.desc())
    )
    return list(db.execute(stmt).scalars())


def list_used(db: Session) -> list[AccessCode]:
    stmt = (
        select(AccessCode)
        .where(AccessCode.is_used.is_(True))
        .order_by(AccessCode.activated_at.desc(), AccessCode.id.desc())
    )
    return list(db.execute(stmt).scalars())


def statistics(db: Session) -> dict[str, int]:
    total = db.execute(select(func.count(AccessCode.id))).scalar_one()
    used = db.execute(select(func.count(AccessCode.id)).where(AccessCode.is_used.is_(True))).scalar_one()
    since = utc_now() - timedelta(days=RECENT_WINDOW_DAYS)
    recent = db.execute(select(func.count(AccessCode.id)).where(AccessCode.created_at >= since)).scalar_one()
    return {"total": int(total), "used": int(used), "unused": int(total) - int(used), "recent": int(recent)}
