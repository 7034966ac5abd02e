from __future__ import annotations

import os
from typing import Any

import openai
from openai import OpenAI

from design_review import logger as logger_mod

from .base import CompletionGateway, LLMConfig
from .errors import LLMError, TransportError, TransportErrorKind
from .types import LLMMessage

log = logger_mod.get_logger()


def classify_openai_error(error: Exception) -> TransportError | None:
    """Map an ``openai`` SDK exception to a ``TransportError``.

    Returns None for exceptions that are not transport failures.
    """

    # APITimeoutError subclasses APIConnectionError, so check it first.
    if isinstance(error, openai.APITimeoutError):
        return TransportError(TransportErrorKind.TIMEOUT, str(error) or "request timed out")
    if isinstance(error, openai.APIConnectionError):
        return TransportError(TransportErrorKind.NETWORK, str(error) or "connection error")
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return TransportError(TransportErrorKind.AUTH, str(error))
    if isinstance(error, openai.RateLimitError):
        return TransportError(TransportErrorKind.RATE_LIMITED, str(error))
    if isinstance(error, openai.APIStatusError):
        status = getattr(error, "status_code", None)
        if status == 408:
            return TransportError(TransportErrorKind.TIMEOUT, str(error))
        return TransportError(
            TransportErrorKind.NETWORK, f"provider returned HTTP {status}: {error}"
        )
    return None


def message_text(content: Any) -> str:
    """Flatten chat message content into one string.

    Content is either a plain string or a list of parts; text parts are
    concatenated in order and anything else is skipped.
    """

    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
            continue
        if isinstance(part, dict):
            kind, text = part.get("type"), part.get("text")
        else:
            kind, text = getattr(part, "type", None), getattr(part, "text", None)
        if kind in (None, "text", "output_text") and isinstance(text, str):
            parts.append(text)
    return "".join(parts)


class OpenAICompatibleGateway(CompletionGateway):
    """Completion gateway for OpenAI-compatible chat endpoints (OpenAI, Groq).

    The SDK's own retry loop is disabled; retries belong to the pipeline.
    """

    def __init__(self, config: LLMConfig, client: Any = None):
        self._cfg = config
        if client is not None:
            self._client = client
            return

        api_key = os.getenv(config.api_key_env)
        if not api_key:
            raise LLMError(
                f"Missing env var {config.api_key_env} for {config.provider} API key"
            )

        self._client = OpenAI(
            api_key=api_key,
            base_url=config.base_url,
            timeout=config.timeout_s,
            max_retries=0,
        )

    @property
    def config(self) -> LLMConfig:
        return self._cfg

    def complete(self, prompt_text: str) -> str:
        messages = [LLMMessage(role="user", content=prompt_text)]
        log.debug(
            "Requesting completion provider=%s model=%s prompt_chars=%d",
            self._cfg.provider,
            self._cfg.model,
            len(prompt_text),
        )
        try:
            resp = self._client.chat.completions.create(
                model=self._cfg.model,
                messages=[{"role": m.role, "content": m.content} for m in messages],
                temperature=self._cfg.temperature,
                max_tokens=self._cfg.max_tokens,
                timeout=self._cfg.timeout_s,
            )
        except openai.OpenAIError as e:
            transport_error = classify_openai_error(e)
            if transport_error is None:
                raise LLMError(f"{self._cfg.provider} completion failed: {e}") from e
            log.warning(
                "Completion failed provider=%s kind=%s: %s",
                self._cfg.provider,
                transport_error.kind.value,
                e,
            )
            raise transport_error from e

        choices = getattr(resp, "choices", None) or []
        if not choices:
            return ""
        return message_text(getattr(choices[0].message, "content", None)).strip()
