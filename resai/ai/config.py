import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    api_key: str
    base_url: str | None
    timeout_s: float
    max_retries: int


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()
    model = (os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip()
    return AIConfig(
        provider=provider,
        model=model,
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
        base_url=(os.getenv("OPENAI_BASE_URL") or "").strip() or None,
        timeout_s=float(os.getenv("OPENAI_TIMEOUT_S", "60")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "0")),
    )
