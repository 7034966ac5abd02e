from __future__ import annotations

from design_review import config

from .base import CompletionGateway, LLMConfig
from .errors import LLMError
from .openai_client import OpenAICompatibleGateway


def build_gateway(
    *, provider: str | None = None, model: str | None = None
) -> CompletionGateway:
    """Factory for completion gateways.

    Providers:
    - groq (OpenAI-compatible endpoint)
    - openai

    Extend by adding new provider clients and mapping here.
    """

    p = (provider or config.LLM_PROVIDER).lower().strip()
    m = model or config.LLM_MODEL
    common = dict(
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
        timeout_s=config.LLM_TIMEOUT_S,
    )

    if p == "groq":
        return OpenAICompatibleGateway(
            LLMConfig(
                provider="groq",
                model=m,
                api_key_env="GROQ_API_KEY",
                base_url=config.GROQ_BASE_URL,
                **common,
            )
        )
    if p == "openai":
        return OpenAICompatibleGateway(
            LLMConfig(provider="openai", model=m, api_key_env="OPENAI_API_KEY", **common)
        )

    raise LLMError(f"Unknown LLM provider: {provider}")
