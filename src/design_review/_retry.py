from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from design_review import config
from design_review import logger as logger_mod
from design_review.llm.errors import TransportError, TransportErrorKind

log = logger_mod.get_logger()

DEFAULT_RETRYABLE_KINDS = frozenset(
    {TransportErrorKind.RATE_LIMITED, TransportErrorKind.TIMEOUT}
)


@dataclass(frozen=True)
class RetryConfig:
    """Retry/backoff settings for completion calls.

    Notes:
    - `max_retries` counts additional attempts after the first call.
    - `max_attempts` is accepted as an alias for the total number of calls.
    """

    max_retries: int = config.MAX_RETRIES
    base_delay_s: float = config.RETRY_BASE_DELAY_S
    max_delay_s: float = config.RETRY_MAX_DELAY_S
    retryable_kinds: FrozenSet[TransportErrorKind] = field(
        default=DEFAULT_RETRYABLE_KINDS
    )

    max_attempts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_attempts is not None:
            object.__setattr__(self, "max_retries", int(self.max_attempts) - 1)

        # Clamp instead of raising to keep retry helpers low-friction.
        if self.max_retries < 0:
            object.__setattr__(self, "max_retries", 0)

        if self.base_delay_s < 0:
            object.__setattr__(self, "base_delay_s", 0.0)

        if self.max_delay_s < self.base_delay_s:
            object.__setattr__(self, "max_delay_s", float(self.base_delay_s))


def is_retryable_transport_error(
    error: TransportError, retry: RetryConfig | None = None
) -> bool:
    """Return True when re-issuing the same request may succeed."""

    retry = retry or RetryConfig()
    return error.kind in retry.retryable_kinds


def backoff_delay(retry_number: int, retry: RetryConfig | None = None) -> float:
    """Delay before the given retry (1-based): exponential with 0.7x-1.3x jitter."""

    retry = retry or RetryConfig()
    delay = retry.base_delay_s * (2 ** max(0, retry_number - 1))
    return min(retry.max_delay_s, delay) * (0.7 + random.random() * 0.6)
