"""
Retry wrapper shared by every Gemini call site.

Behavior:
- Up to `max_attempts` invocations of an idempotent operation.
- Wait base_delay * 2^(n-1) before the n-th retry (no jitter).
- Invalid credentials abort immediately; quota exhaustion aborts immediately
  when the call site opts in (image generation).
- Anything else (empty payload, bad JSON, schema mismatch, transient API
  error) consumes an attempt.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Type, TypeVar

from app.utils.exceptions import (
    InvalidCredentialError,
    MixMasterException,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]

_CREDENTIAL_MARKERS = ("API key not valid", "API_KEY_INVALID")


class FailureKind(str, Enum):
    """How a failed attempt affects the retry sequence."""

    RETRYABLE = "retryable"
    INVALID_CREDENTIAL = "invalid_credential"
    QUOTA_EXCEEDED = "quota_exceeded"


def _error_message(exc: BaseException) -> str:
    # google.genai.errors.APIError exposes .message; everything else falls back to str()
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


def classify_error(exc: BaseException, *, quota_is_fatal: bool = False) -> FailureKind:
    """Classify an exception raised by one remote attempt."""
    if isinstance(exc, InvalidCredentialError):
        return FailureKind.INVALID_CREDENTIAL
    message = _error_message(exc)
    if any(marker in message for marker in _CREDENTIAL_MARKERS):
        return FailureKind.INVALID_CREDENTIAL

    if quota_is_fatal:
        if isinstance(exc, QuotaExceededError):
            return FailureKind.QUOTA_EXCEEDED
        status = getattr(exc, "status", None)
        if status == "RESOURCE_EXHAUSTED" or "quota" in message.lower():
            return FailureKind.QUOTA_EXCEEDED

    return FailureKind.RETRYABLE


@dataclass
class CallAttempt:
    """One attempt of a retry sequence."""

    attempt: int
    delay: float
    outcome: str
    error: Optional[str] = None


class RetryableCall:
    """Run one remote operation with classified failures and exponential backoff."""

    def __init__(
        self,
        *,
        name: str,
        max_attempts: int,
        base_delay: float,
        failure_error: Type[MixMasterException],
        quota_is_fatal: bool = False,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.name = name
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.failure_error = failure_error
        self.quota_is_fatal = quota_is_fatal
        self._sleep = sleep or asyncio.sleep
        self.attempts: List[CallAttempt] = []

    def backoff_delay(self, retry_number: int) -> float:
        """Delay in seconds before the given retry (1-based)."""
        return self.base_delay * (2 ** (retry_number - 1))

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute `operation` until it returns, a fatal error occurs, or attempts run out.

        Raises:
            InvalidCredentialError: On the first credential rejection
            QuotaExceededError: On the first quota rejection (quota_is_fatal only)
            failure_error: When every attempt failed
        """
        self.attempts = []
        delay = 0.0

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation()
            except Exception as e:
                kind = classify_error(e, quota_is_fatal=self.quota_is_fatal)
                self.attempts.append(CallAttempt(attempt, delay, kind.value, str(e)))

                if kind == FailureKind.INVALID_CREDENTIAL:
                    logger.error("%s rejected: invalid API key", self.name)
                    raise InvalidCredentialError("Gemini rejected the configured API key") from e
                if kind == FailureKind.QUOTA_EXCEEDED:
                    logger.error("%s rejected: quota exceeded", self.name)
                    raise QuotaExceededError("Gemini quota exceeded") from e

                logger.warning(
                    "%s attempt %d/%d failed: %s",
                    self.name,
                    attempt,
                    self.max_attempts,
                    str(e),
                )
                if attempt < self.max_attempts:
                    delay = self.backoff_delay(attempt)
                    await self._sleep(delay)
                continue

            self.attempts.append(CallAttempt(attempt, delay, "success"))
            return result

        last = self.attempts[-1].error if self.attempts else None
        logger.error(
            "%s failed after %d attempts. Last error: %s",
            self.name,
            self.max_attempts,
            last,
        )
        raise self.failure_error(f"{self.name} failed")
