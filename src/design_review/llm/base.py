from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    model: str
    api_key_env: str
    base_url: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 1200
    timeout_s: float = 60.0


class CompletionGateway(Protocol):
    """Single text-in/text-out completion call.

    Implementations never retry; they raise ``TransportError`` on failure and
    leave retry policy to the caller.
    """

    def complete(self, prompt_text: str) -> str:
        raise NotImplementedError
