"""Sequential model fallback for the generation API.

Candidates are tried strictly in order, one call each. Only a "model not
found" failure moves on to the next candidate; every other failure ends the
run immediately, since a different model cannot fix a bad key or a spent
quota.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Sequence

from pydantic_ai.exceptions import ModelHTTPError

from app.core.logging import get_logger
from app.modules.study_cards.errors import (
    AuthError,
    ConfigurationError,
    GenerationError,
    ModelExhaustedError,
    PipelineCancelled,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = get_logger(__name__)

DEFAULT_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-1.5-pro",
    "gemini-pro",
)

# Returns 404 on the v1beta API even when explicitly configured.
INCOMPATIBLE_MODEL = "gemini-1.5-flash"

GenerateFn = Callable[[str, str], Awaitable[str]]


class AttemptOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass
class ModelAttempt:
    model: str
    outcome: AttemptOutcome
    text: str | None = None
    error: BaseException | None = None

    @property
    def should_fall_back(self) -> bool:
        return self.outcome is AttemptOutcome.NOT_FOUND


@dataclass
class FallbackResult:
    text: str
    model: str
    attempts: list[ModelAttempt] = field(default_factory=list)


def resolve_candidates(
    preferred: str | None,
    defaults: Iterable[str] = DEFAULT_MODELS,
) -> tuple[str, ...]:
    """Build the ordered candidate list, promoting ``preferred`` to the front.

    The legacy incompatible model is always removed, whether it comes from
    configuration or from the defaults.
    """
    preferred = (preferred or "").strip() or None
    if preferred == INCOMPATIBLE_MODEL:
        logger.warning(
            "%s does not work on the v1beta API; using the default models instead",
            INCOMPATIBLE_MODEL,
        )
        preferred = None

    ordered: list[str] = [preferred] if preferred else []
    for model in defaults:
        if model != INCOMPATIBLE_MODEL and model not in ordered:
            ordered.append(model)
    return tuple(ordered)


def _status_of(exc: BaseException) -> int | None:
    if isinstance(exc, ModelHTTPError):
        return exc.status_code
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_failure(exc: BaseException) -> AttemptOutcome:
    if isinstance(exc, asyncio.TimeoutError):
        return AttemptOutcome.TIMEOUT
    status = _status_of(exc)
    if status == 404:
        return AttemptOutcome.NOT_FOUND
    if status in (401, 403):
        return AttemptOutcome.AUTH
    if status == 429:
        return AttemptOutcome.RATE_LIMIT
    return AttemptOutcome.UNKNOWN


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "no response before the attempt timeout"
    if isinstance(exc, ModelHTTPError):
        return f"HTTP {exc.status_code}: {exc.body}" if exc.body else f"HTTP {exc.status_code}"
    return str(exc) or type(exc).__name__


def _to_error(attempt: ModelAttempt) -> GenerationError:
    detail = _error_message(attempt.error) if attempt.error else None
    if attempt.outcome is AttemptOutcome.AUTH:
        return AuthError(model=attempt.model, detail=detail)
    if attempt.outcome is AttemptOutcome.RATE_LIMIT:
        return RateLimitError(model=attempt.model, detail=detail)
    if attempt.outcome is AttemptOutcome.TIMEOUT:
        return UpstreamTimeoutError(model=attempt.model, detail=detail)
    return UpstreamError(model=attempt.model, detail=detail)


class ModelFallbackCaller:
    """Try each candidate model in order until one answers."""

    def __init__(
        self,
        generate: GenerateFn,
        models: Sequence[str],
        *,
        attempt_timeout: float | None = None,
    ) -> None:
        if not models:
            raise ConfigurationError("At least one Gemini model must be configured.")
        self.generate = generate
        self.models = tuple(models)
        self.attempt_timeout = attempt_timeout

    async def _generate(self, model: str, prompt: str) -> str:
        if self.attempt_timeout:
            return await asyncio.wait_for(
                self.generate(model, prompt), timeout=self.attempt_timeout
            )
        return await self.generate(model, prompt)

    async def _generate_or_cancel(
        self, model: str, prompt: str, cancel: asyncio.Event
    ) -> str:
        """Race the call against ``cancel``; the in-flight call is dropped on cancel."""
        call = asyncio.ensure_future(self._generate(model, prompt))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            waiter.cancel()

        if cancel.is_set():
            if call.done() and not call.cancelled():
                call.exception()
            else:
                call.cancel()
            logger.warning("Gemini model %s call cancelled", model)
            raise PipelineCancelled()
        return call.result()

    async def _attempt(
        self, model: str, prompt: str, cancel: asyncio.Event | None = None
    ) -> ModelAttempt:
        logger.info("Calling Gemini model %s", model)
        try:
            if cancel is None:
                text = await self._generate(model, prompt)
            else:
                text = await self._generate_or_cancel(model, prompt, cancel)
        except PipelineCancelled:
            raise
        except Exception as exc:
            return ModelAttempt(model, classify_failure(exc), error=exc)
        return ModelAttempt(model, AttemptOutcome.SUCCEEDED, text=text)

    async def call(
        self, prompt: str, *, cancel: asyncio.Event | None = None
    ) -> FallbackResult:
        attempts: list[ModelAttempt] = []
        for model in self.models:
            if cancel is not None and cancel.is_set():
                raise PipelineCancelled()

            attempt = await self._attempt(model, prompt, cancel)
            attempts.append(attempt)

            if attempt.outcome is AttemptOutcome.SUCCEEDED:
                logger.info(
                    "Gemini model %s answered (%d chars)", model, len(attempt.text or "")
                )
                return FallbackResult(text=attempt.text or "", model=model, attempts=attempts)

            if not attempt.should_fall_back:
                logger.error(
                    "Gemini model %s failed (%s): %s",
                    model,
                    attempt.outcome.value,
                    _error_message(attempt.error) if attempt.error else "-",
                )
                raise _to_error(attempt) from attempt.error

            logger.warning("Gemini model %s not found, trying next candidate", model)

        last = attempts[-1]
        raise ModelExhaustedError(
            model=last.model,
            detail=_error_message(last.error) if last.error else None,
        ) from last.error
