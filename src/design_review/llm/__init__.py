"""LLM completion gateway.

Design goals:
- Keep provider-specific SDKs isolated.
- Expose one blocking text-in/text-out call with typed transport errors.
- No retries here; retry policy lives in the review pipeline.
"""

from .base import CompletionGateway, LLMConfig
from .errors import LLMError, TransportError, TransportErrorKind
from .factory import build_gateway
from .types import LLMMessage

__all__ = [
    "CompletionGateway",
    "LLMConfig",
    "LLMError",
    "LLMMessage",
    "TransportError",
    "TransportErrorKind",
    "build_gateway",
]
