from __future__ import annotations

from enum import Enum


class LLMError(RuntimeError):
    pass


class TransportErrorKind(str, Enum):
    NETWORK = "Network"
    AUTH = "Auth"
    RATE_LIMITED = "RateLimited"
    TIMEOUT = "Timeout"


class TransportError(LLMError):
    """Raised when a completion call fails before any text comes back."""

    def __init__(self, kind: TransportErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
