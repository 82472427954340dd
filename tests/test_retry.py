"""Tests for the retry wrapper."""

from types import SimpleNamespace

import pytest

from app.services.retry import FailureKind, RetryableCall, classify_error
from app.utils.exceptions import (
    GenerationFailedError,
    InvalidCredentialError,
    QuotaExceededError,
)


def failing_operation(errors, result="ok"):
    """Operation raising the given errors in order, then returning `result`."""
    calls = []

    async def operation():
        calls.append(len(calls) + 1)
        if errors:
            raise errors.pop(0)
        return result

    return operation, calls


def make_call(sleep, max_attempts=5, quota_is_fatal=False):
    return RetryableCall(
        name="generate_cocktails",
        max_attempts=max_attempts,
        base_delay=3.0,
        failure_error=GenerationFailedError,
        quota_is_fatal=quota_is_fatal,
        sleep=sleep,
    )


def test_backoff_delay_doubles():
    """Test delays follow base * 2^(n-1)."""
    call = RetryableCall(name="x", max_attempts=5, base_delay=3.0, failure_error=GenerationFailedError)
    assert [call.backoff_delay(n) for n in (1, 2, 3, 4)] == [3.0, 6.0, 12.0, 24.0]


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        RetryableCall(name="x", max_attempts=0, base_delay=1.0, failure_error=GenerationFailedError)


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures(sleep):
    """Test two failures then success waits 3s and 6s."""
    operation, calls = failing_operation([RuntimeError("boom"), ValueError("bad json")])
    call = make_call(sleep)

    assert await call.run(operation) == "ok"
    assert calls == [1, 2, 3]
    assert sleep.calls == [3.0, 6.0]
    assert [a.outcome for a in call.attempts] == ["retryable", "retryable", "success"]


@pytest.mark.asyncio
async def test_exhaustion_raises_failure_error(sleep):
    """Test every attempt failing raises the call's failure error with no trailing wait."""
    operation, calls = failing_operation([RuntimeError("boom") for _ in range(4)])
    call = make_call(sleep, max_attempts=4)

    with pytest.raises(GenerationFailedError):
        await call.run(operation)
    assert len(calls) == 4
    assert sleep.calls == [3.0, 6.0, 12.0]


@pytest.mark.asyncio
async def test_invalid_credential_aborts_immediately(sleep):
    operation, calls = failing_operation([RuntimeError("400 INVALID_ARGUMENT. API key not valid. Please pass a valid API key.")])
    call = make_call(sleep)

    with pytest.raises(InvalidCredentialError):
        await call.run(operation)
    assert calls == [1]
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_quota_is_fatal_when_requested(sleep):
    operation, calls = failing_operation([RuntimeError("429 RESOURCE_EXHAUSTED. Quota exceeded for metric")])
    call = make_call(sleep, quota_is_fatal=True)

    with pytest.raises(QuotaExceededError):
        await call.run(operation)
    assert calls == [1]
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_quota_is_retried_by_default(sleep):
    operation, calls = failing_operation([RuntimeError("quota exceeded")], result=["Vodka"])
    call = make_call(sleep)

    assert await call.run(operation) == ["Vodka"]
    assert calls == [1, 2]
    assert sleep.calls == [3.0]


def test_classify_error():
    assert classify_error(InvalidCredentialError("bad key")) == FailureKind.INVALID_CREDENTIAL
    assert classify_error(SimpleNamespace(message="API_KEY_INVALID")) == FailureKind.INVALID_CREDENTIAL
    assert classify_error(QuotaExceededError("quota"), quota_is_fatal=True) == FailureKind.QUOTA_EXCEEDED
    assert classify_error(QuotaExceededError("quota")) == FailureKind.RETRYABLE
    assert classify_error(SimpleNamespace(status="RESOURCE_EXHAUSTED", message="429"), quota_is_fatal=True) == FailureKind.QUOTA_EXCEEDED
    assert classify_error(TimeoutError("timed out"), quota_is_fatal=True) == FailureKind.RETRYABLE
