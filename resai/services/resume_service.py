from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from resai.core.clock import utc_now
from resai.core.errors import EmptyResume, NotFound
from resai.models.resume import Resume
from resai.models.user import User
from resai.schemas.resume import ResumeUpdate
from resai.services import user_service
from resai.services.ai_service import AiService

logger = logging.getLogger(__name__)

TAILORED_FOR_CHARS = 200


def create(
    db: Session,
    user: User,
    title: str,
    data: dict[str, Any],
    ai_metadata: dict[str, Any] | None = None,
    language: str = "en",
) -> Resume:
    resume = Resume(
        user_id=user.id,
        title=title,
        data=dict(data),
        ai_metadata=dict(ai_metadata) if ai_metadata is not None else None,
        version=1,
        language=language or "en",
    )
    db.add(resume)
    db.commit()
    db.refresh(resume)
    logger.info("resume_created resume_id=%s user_id=%s", resume.id, user.id)
    return resume


def list_for_user(db: Session, user_id: int) -> list[Resume]:
    stmt = (
        select(Resume)
        .where(Resume.user_id == user_id)
        .order_by(Resume.updated_at.desc(), Resume.id.desc())
    )
    return list(db.execute(stmt).scalars())


def count_all(db: Session) -> int:
    return int(db.execute(select(func.count(Resume.id))).scalar_one())


def get(db: Session, resume_id: int, user_id: int) -> Resume:
    # Foreign resumes are reported as missing, never as forbidden.
    resume = db.execute(
        select(Resume).where(Resume.id == resume_id, Resume.user_id == user_id)
    ).scalar_one_or_none()
    if resume is None:
        raise NotFound("Resume not found")
    return resume


def update(db: Session, resume_id: int, user_id: int, changes: ResumeUpdate) -> Resume:
    resume = get(db, resume_id, user_id)
    present = changes.model_fields_set

    if "title" in present and changes.title is not None and changes.title.strip():
        resume.title = changes.title
    if "data" in present and changes.data is not None:
        resume.data = dict(changes.data)
    if "ai_metadata" in present and changes.ai_metadata is not None:
        resume.ai_metadata = dict(changes.ai_metadata)

    resume.version = (resume.version or 1) + 1
    resume.updated_at = utc_now()
    db.commit()
    db.refresh(resume)
    logger.info("resume_updated resume_id=%s version=%s fields=%s", resume.id, resume.version, sorted(present))
    return resume


def delete(db: Session, resume_id: int, user_id: int) -> None:
    resume = get(db, resume_id, user_id)
    db.delete(resume)
    db.commit()
    logger.info("resume_deleted resume_id=%s user_id=%s", resume_id, user_id)


def _language_of(resume: Resume) -> str:
    language = (resume.language or "").strip()
    return language or "en"


def _load_for_ai(db: Session, resume_id: int, user_id: int) -> tuple[Resume, User]:
    resume = get(db, resume_id, user_id)
    if not resume.data:
        raise EmptyResume("Resume has no data")
    user = user_service.get_user(db, user_id)
    return resume, user


def tailor(db: Session, ai: AiService, resume_id: int, user_id: int, job_description: str) -> Resume:
    resume, user = _load_for_ai(db, resume_id, user_id)
    user_service.check_quota(user, "tailor")
    language = _language_of(resume)
    logger.info("resume_tailoring resume_id=%s user_id=%s language=%s", resume.id, user_id, language)

    tailored = ai.tailor_resume(resume.data, job_description, language)

    metadata = dict(resume.ai_metadata or {})
    metadata["lastTailoredAt"] = utc_now().isoformat()
    metadata["tailoredFor"] = job_description[:TAILORED_FOR_CHARS] + "..."
    metadata["tailoredLanguage"] = language

    resume.data = tailored
    resume.ai_metadata = metadata
    resume.version = (resume.version or 1) + 1
    resume.updated_at = utc_now()
    user_service.record_usage(user, "tailor")
    db.commit()
    db.refresh(resume)
    logger.info("resume_tailored resume_id=%s version=%s language=%s", resume.id, resume.version, language)
    return resume


def generate_cover_letter(db: Session, ai: AiService, resume_id: int, user_id: int, job_description: str) -> str:
    resume, user = _load_for_ai(db, resume_id, user_id)
    user_service.check_quota(user, "cover_letter")
    language = _language_of(resume)
    letter = ai.generate_cover_letter(resume.data, job_description, language)
    user_service.record_usage(user, "cover_letter")
    db.commit()
    logger.info("cover_letter_generated resume_id=%s language=%s", resume.id, language)
    return letter
