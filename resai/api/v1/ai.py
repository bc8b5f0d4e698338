from fastapi import APIRouter, Depends, Request

from resai.core.errors import ValidationError
from resai.core.rate_limit import rate_limit
from resai.core.security import get_current_user
from resai.models.user import User
from resai.schemas.ai import AiRequest, AiResponse
from resai.services.ai_service import AiService, get_ai_service

router = APIRouter(prefix="/ai")


def _user_input(payload: AiRequest) -> str:
    text = payload.user_input.strip()
    if not text:
        raise ValidationError("userInput must not be blank")
    return text


@router.post("/generate-summary", response_model=AiResponse)
@rate_limit()
def generate_summary(
    request: Request,
    payload: AiRequest,
    user: User = Depends(get_current_user),
    ai: AiService = Depends(get_ai_service),
):
    _ = request
    text = ai.generate_summary(_user_input(payload), payload.language)
    return AiResponse(success=True, generated_text=text)


@router.post("/generate-experience-bullets", response_model=AiResponse)
@rate_limit()
def generate_experience_bullets(
    request: Request,
    payload: AiRequest,
    user: User = Depends(get_current_user),
    ai: AiService = Depends(get_ai_service),
):
    _ = request
    text = ai.generate_experience_bullets(_user_input(payload), payload.context, payload.language)
    return AiResponse(success=True, generated_text=text)


@router.post("/generate-project-bullets", response_model=AiResponse)
@rate_limit()
def generate_project_bullets(
    request: Request,
    payload: AiRequest,
    user: User = Depends(get_current_user),
    ai: AiService = Depends(get_ai_service),
):
    _ = request
    text = ai.generate_project_bullets(_user_input(payload), payload.context, payload.language)
    return AiResponse(success=True, generated_text=text)
