from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from resai.core.security import get_current_user
from resai.db.session import get_db
from resai.models.user import User
from resai.schemas.resume import (
    CoverLetterResponse,
    JobDescriptionRequest,
    ResumeCreate,
    ResumeSummary,
    ResumeUpdate,
    ResumeView,
)
from resai.services import resume_service
from resai.services.ai_service import AiService, get_ai_service

router = APIRouter(prefix="/resumes")


@router.post("/create", response_model=ResumeView, status_code=status.HTTP_201_CREATED)
def create_resume(
    payload: ResumeCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return resume_service.create(
        db,
        user,
        title=payload.title,
        data=payload.data,
        ai_metadata=payload.ai_metadata,
        language=payload.language,
    )


@router.get("", response_model=list[ResumeSummary])
def list_resumes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return resume_service.list_for_user(db, user.id)


@router.get("/{resume_id}", response_model=ResumeView)
def get_resume(resume_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return resume_service.get(db, resume_id, user.id)


@router.put("/{resume_id}", response_model=ResumeView)
def update_resume(
    resume_id: int,
    payload: ResumeUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return resume_service.update(db, resume_id, user.id, payload)


@router.delete("/{resume_id}")
def delete_resume(resume_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    resume_service.delete(db, resume_id, user.id)
    return {"success": True}


@router.post("/{resume_id}/tailor", response_model=ResumeView)
def tailor_resume(
    resume_id: int,
    payload: JobDescriptionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai: AiService = Depends(get_ai_service),
):
    return resume_service.tailor(db, ai, resume_id, user.id, payload.job_description)


@router.post("/{resume_id}/cover-letter", response_model=CoverLetterResponse)
def cover_letter(
    resume_id: int,
    payload: JobDescriptionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai: AiService = Depends(get_ai_service),
):
    letter = resume_service.generate_cover_letter(db, ai, resume_id, user.id, payload.job_description)
    return CoverLetterResponse(resume_id=resume_id, cover_letter=letter)
