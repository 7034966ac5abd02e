"""Review pipeline: brief in, schema-valid critique (or one typed failure) out.

States run ``ASSEMBLING -> COMPLETING -> EXTRACTING -> DONE``. Retryable
transport failures re-enter ``COMPLETING`` with backoff until the retry
budget runs out; every other failure ends the run in a terminal state.
Callers always get a ``PipelineResult``; only programming errors raised by a
gateway implementation escape as exceptions.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from design_review import config
from design_review import logger as logger_mod
from design_review._retry import RetryConfig, backoff_delay, is_retryable_transport_error
from design_review.llm.base import CompletionGateway
from design_review.llm.errors import TransportError, TransportErrorKind

from .errors import ExtractionError, SchemaViolationError
from .extractor import extract
from .instructions import get_format_instructions
from .prompt import assemble, build_corrective_prompt

log = logger_mod.get_logger()


class PipelineState(str, Enum):
    ASSEMBLING = "Assembling"
    COMPLETING = "Completing"
    EXTRACTING = "Extracting"
    DONE = "Done"
    FAILED_INVALID_REQUEST = "Failed(InvalidRequest)"
    FAILED_TRANSPORT = "Failed(Transport)"
    FAILED_EXTRACTION = "Failed(Extraction)"
    CANCELLED = "Cancelled"


# Kinds that cannot succeed no matter how often the caller retries.
_PERMANENT_KINDS = {"InvalidRequest", "TransportError.Auth"}


@dataclass(frozen=True)
class PipelineError:
    """Failure surfaced to the caller: a kind tag plus a readable message."""

    kind: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def retryable_by_caller(self) -> bool:
        """True for "try again later", False for "cannot succeed as given"."""
        return self.kind not in _PERMANENT_KINDS

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "kind": self.kind,
            "message": self.message,
            "retryable_by_caller": self.retryable_by_caller,
        }
        if self.details:
            out["details"] = self.details
        return out

    @classmethod
    def invalid_request(cls, message: str) -> "PipelineError":
        return cls(kind="InvalidRequest", message=message)

    @classmethod
    def from_transport(cls, error: TransportError) -> "PipelineError":
        return cls(kind=f"TransportError.{error.kind.value}", message=error.message)

    @classmethod
    def from_extraction(cls, error: ExtractionError) -> "PipelineError":
        details: Dict[str, Any] = {}
        if isinstance(error, SchemaViolationError):
            details["violations"] = [
                {"field": v.field, "constraint": v.constraint, "message": v.message}
                for v in error.violations
            ]
        position = getattr(error, "position", None)
        if position is not None:
            details["position"] = position
        return cls(kind=error.kind, message=str(error), details=details)

    @classmethod
    def cancelled(cls) -> "PipelineError":
        return cls(kind="Cancelled", message="Review was cancelled by the caller")


@dataclass(frozen=True)
class PipelineResult:
    state: PipelineState
    value: Optional[Dict[str, Any]] = None
    error: Optional[PipelineError] = None
    attempts: int = 0
    retries: int = 0
    corrected: bool = False
    history: Tuple[PipelineState, ...] = ()

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE


@dataclass(frozen=True)
class PipelinePolicy:
    retry: RetryConfig = field(default_factory=RetryConfig)
    timeout_s: float = config.PIPELINE_TIMEOUT_S
    corrective_reprompt: bool = config.CORRECTIVE_REPROMPT
    poll_interval_s: float = 0.05


class CancelToken:
    """Thread-safe cancellation flag shared between a caller and one run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; return True as soon as cancelled."""
        return self._event.wait(timeout)


class _Cancelled(Exception):
    pass


class _DeadlineExceeded(Exception):
    pass


class _Run:
    """Mutable bookkeeping for one invocation; never shared."""

    def __init__(self, deadline: float, cancel: CancelToken):
        self.deadline = deadline
        self.cancel = cancel
        self.attempts = 0
        self.retries = 0
        self.corrected = False
        self.history: List[PipelineState] = []

    def enter(self, state: PipelineState) -> None:
        log.debug("review pipeline -> %s", state.value)
        self.history.append(state)

    def remaining(self) -> float:
        return self.deadline - time.monotonic()

    def finish(self, state: PipelineState, **kwargs: Any) -> PipelineResult:
        self.enter(state)
        return PipelineResult(
            state=state,
            attempts=self.attempts,
            retries=self.retries,
            corrected=self.corrected,
            history=tuple(self.history),
            **kwargs,
        )


class ReviewPipeline:
    """Compose assembling, completion and extraction into one call.

    The gateway and the compiled instructions are read-only and may be shared
    by concurrent runs; everything else lives in the run.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        policy: PipelinePolicy | None = None,
        instructions: str | None = None,
    ):
        self._gateway = gateway
        self._policy = policy or PipelinePolicy()
        self._instructions = instructions or get_format_instructions()

    @property
    def policy(self) -> PipelinePolicy:
        return self._policy

    def review(
        self,
        brief: str,
        artifact_name: str | None = None,
        artifact_kind: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> PipelineResult:
        run = _Run(
            deadline=time.monotonic() + self._policy.timeout_s,
            cancel=cancel or CancelToken(),
        )
        run.enter(PipelineState.ASSEMBLING)

        if not isinstance(brief, str) or not brief.strip():
            log.info("Rejecting review request: empty brief")
            return run.finish(
                PipelineState.FAILED_INVALID_REQUEST,
                error=PipelineError.invalid_request("brief must be non-empty text"),
            )

        prompt = assemble(
            brief,
            artifact_name or config.DEFAULT_ARTIFACT_NAME,
            artifact_kind or config.DEFAULT_ARTIFACT_KIND,
            self._instructions,
        )

        while True:
            try:
                raw_text = self._complete_with_retry(prompt, run)
            except _Cancelled:
                log.info("Review cancelled after %d attempt(s)", run.attempts)
                return run.finish(
                    PipelineState.CANCELLED, error=PipelineError.cancelled()
                )
            except _DeadlineExceeded:
                log.warning(
                    "Review timed out after %.1fs (%d attempt(s))",
                    self._policy.timeout_s,
                    run.attempts,
                )
                return run.finish(
                    PipelineState.FAILED_TRANSPORT,
                    error=PipelineError.from_transport(
                        TransportError(
                            TransportErrorKind.TIMEOUT,
                            f"review did not finish within {self._policy.timeout_s}s",
                        )
                    ),
                )
            except TransportError as e:
                log.warning("Review failed with transport error %s", e)
                return run.finish(
                    PipelineState.FAILED_TRANSPORT,
                    error=PipelineError.from_transport(e),
                )

            run.enter(PipelineState.EXTRACTING)
            try:
                value = extract(raw_text)
            except SchemaViolationError as e:
                if self._policy.corrective_reprompt and not run.corrected:
                    log.info(
                        "Schema violations in model output; sending one corrective prompt"
                    )
                    run.corrected = True
                    prompt = build_corrective_prompt(prompt, e.violations)
                    continue
                log.warning("Review output rejected: %s", e)
                return run.finish(
                    PipelineState.FAILED_EXTRACTION,
                    error=PipelineError.from_extraction(e),
                )
            except ExtractionError as e:
                log.warning("Review output rejected: %s", e)
                return run.finish(
                    PipelineState.FAILED_EXTRACTION,
                    error=PipelineError.from_extraction(e),
                )

            log.info(
                "Review done in %d attempt(s), %d retr%s",
                run.attempts,
                run.retries,
                "y" if run.retries == 1 else "ies",
            )
            return run.finish(PipelineState.DONE, value=value)

    def _complete_with_retry(self, prompt: str, run: _Run) -> str:
        retry = self._policy.retry
        while True:
            if run.cancel.cancelled:
                raise _Cancelled()
            run.enter(PipelineState.COMPLETING)
            run.attempts += 1
            try:
                return self._call_gateway(prompt, run)
            except TransportError as e:
                if not is_retryable_transport_error(e, retry):
                    raise
                if run.retries >= retry.max_retries:
                    log.warning(
                        "Retry budget exhausted after %d retr%s",
                        run.retries,
                        "y" if run.retries == 1 else "ies",
                    )
                    raise

                run.retries += 1
                delay = min(backoff_delay(run.retries, retry), max(0.0, run.remaining()))
                log.warning(
                    "Retryable completion error (%s); retrying in %.1fs (retry %d/%d)",
                    e.kind.value,
                    delay,
                    run.retries,
                    retry.max_retries,
                )
                if run.cancel.wait(delay):
                    raise _Cancelled()
                if run.remaining() <= 0:
                    raise _DeadlineExceeded()

    def _call_gateway(self, prompt: str, run: _Run) -> str:
        # A worker thread lets the run stop waiting on cancel or deadline even
        # when the underlying transport cannot be interrupted.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="completion")
        future = executor.submit(self._gateway.complete, prompt)
        try:
            while True:
                if run.cancel.cancelled:
                    raise _Cancelled()
                remaining = run.remaining()
                if remaining <= 0:
                    raise _DeadlineExceeded()
                done, _ = wait(
                    [future],
                    timeout=min(self._policy.poll_interval_s, remaining),
                    return_when=FIRST_COMPLETED,
                )
                if done:
                    return future.result()
        finally:
            future.cancel()
            executor.shutdown(wait=False)


def review(
    brief: str,
    artifact_name: str = config.DEFAULT_ARTIFACT_NAME,
    artifact_kind: str = config.DEFAULT_ARTIFACT_KIND,
    *,
    gateway: CompletionGateway,
    policy: PipelinePolicy | None = None,
    cancel: CancelToken | None = None,
) -> PipelineResult:
    """One-shot convenience wrapper around ``ReviewPipeline.review``."""
    return ReviewPipeline(gateway, policy).review(
        brief, artifact_name, artifact_kind, cancel=cancel
    )
