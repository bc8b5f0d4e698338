from __future__ import annotations

import copy
import logging
from typing import Any, Sequence

from resai.ai import prompts
from resai.ai.factory import get_ai_client
from resai.ai.normalize import normalize_tailored_resume
from resai.ai.types import AIClient, AIClientError, ChatMessage
from resai.core.errors import AiGenerationFailed

logger = logging.getLogger(__name__)

SIMPLE_MAX_TOKENS = 500
SIMPLE_TEMPERATURE = 0.7
TAILOR_MAX_TOKENS = 2000
TAILOR_TEMPERATURE = 0.5
COVER_LETTER_MAX_TOKENS = 800
COVER_LETTER_TEMPERATURE = 0.7


class AiService:
    """Prompt building and response handling around the chat-completion client."""

    def __init__(self, client: AIClient | None = None):
        self._client = client

    def _get_client(self) -> AIClient:
        if self._client is None:
            try:
                self._client = get_ai_client()
            except (AIClientError, ValueError) as exc:
                logger.warning("ai_client_unavailable: %s", exc)
                raise AiGenerationFailed(f"AI provider is not configured: {exc}") from exc
        return self._client

    def _complete(self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int) -> str:
        return self._get_client().complete(messages, temperature=temperature, max_tokens=max_tokens)

    def _simple(self, feature: str, messages: Sequence[ChatMessage]) -> str:
        try:
            text = self._complete(messages, temperature=SIMPLE_TEMPERATURE, max_tokens=SIMPLE_MAX_TOKENS)
        except AIClientError as exc:
            logger.warning("ai_generation_failed feature=%s code=%s: %s", feature, exc.code, exc)
            raise AiGenerationFailed(f"Failed to generate {feature}: {exc}") from exc
        return text.strip()

    def generate_summary(self, user_input: str, language: str | None = "en") -> str:
        return self._simple("summary", prompts.summary_messages(user_input, language))

    def generate_experience_bullets(
        self, user_input: str, context: dict[str, str] | None = None, language: str | None = "en"
    ) -> str:
        return self._simple(
            "experience bullets", prompts.experience_bullet_messages(user_input, context, language)
        )

    def generate_project_bullets(
        self, user_input: str, context: dict[str, str] | None = None, language: str | None = "en"
    ) -> str:
        return self._simple("project bullets", prompts.project_bullet_messages(user_input, context, language))

    def tailor_resume(self, resume_data: dict[str, Any], job_description: str, language: str | None = "en") -> dict[str, Any]:
        """Return the tailored document, or the original document when anything goes wrong."""
        lang = prompts.normalize_language(language)
        logger.info("ai_tailoring_started language=%s", lang)
        try:
            raw = self._complete(
                prompts.tailoring_messages(resume_data, job_description, lang),
                temperature=TAILOR_TEMPERATURE,
                max_tokens=TAILOR_MAX_TOKENS,
            )
            return normalize_tailored_resume(raw, resume_data)
        except Exception as exc:  # noqa: BLE001 - original document is the fallback
            logger.warning("ai_tailoring_fallback language=%s error=%s: %s", lang, type(exc).__name__, exc)
            return copy.deepcopy(resume_data)

    def generate_cover_letter(self, resume_data: dict[str, Any], job_description: str, language: str | None = "en") -> str:
        lang = prompts.normalize_language(language)
        try:
            text = self._complete(
                prompts.cover_letter_messages(resume_data, job_description, lang),
                temperature=COVER_LETTER_TEMPERATURE,
                max_tokens=COVER_LETTER_MAX_TOKENS,
            )
        except AIClientError as exc:
            logger.warning("ai_cover_letter_failed language=%s: %s", lang, exc)
            raise AiGenerationFailed(f"Failed to generate cover letter: {exc}") from exc
        logger.info("ai_cover_letter_generated language=%s chars=%s", lang, len(text))
        return text.strip()


def get_ai_service() -> AiService:
    return AiService()
