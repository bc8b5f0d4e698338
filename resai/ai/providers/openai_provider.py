from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from openai import OpenAI, OpenAIError

from resai.ai.types import AIClientError, ChatMessage

logger = logging.getLogger(__name__)


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 0,
    ):
        key = (api_key or "").strip()
        if not key:
            raise AIClientError("OPENAI_API_KEY is missing", code="llm_disabled")

        self._model = model
        self._client = OpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    @property
    def model(self) -> str:
        return self._model

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        started = time.perf_counter()
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            logger.warning("openai_completion_failed model=%s: %s", self._model, exc)
            raise AIClientError(f"AI provider request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        latency_ms = int((time.perf_counter() - started) * 1000)
        if not content or not content.strip():
            logger.warning("openai_completion_empty model=%s latency_ms=%s", self._model, latency_ms)
            raise AIClientError("AI provider returned an empty response", code="empty_response")

        logger.info("openai_completion_ok model=%s latency_ms=%s chars=%s", self._model, latency_ms, len(content))
        return content
