import asyncio
import logging

import pytest

from fanctl.core.errors import (
    RetryExhaustedError,
    TransportSendError,
    TransportTimeoutError,
    ValidationError,
)
from fanctl.core.model import RetryPolicy
from fanctl.core.retry import RetryExecutor


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or TransportSendError("Failed to send UDP message to fan")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "sent"


def test_delay_doubles_per_attempt() -> None:
    policy = RetryPolicy(max_attempts=5, base_delay_s=0.1)
    assert [policy.delay_after(k) for k in (1, 2, 3, 4)] == pytest.approx([0.1, 0.2, 0.4, 0.8])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"max_attempts": 3.0},
        {"max_attempts": True},
        {"base_delay_s": 0},
        {"base_delay_s": -0.1},
        {"attempt_timeout_s": 0},
        {"attempt_timeout_s": -1.0},
    ],
)
def test_policy_rejects_invalid_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        RetryPolicy(**kwargs)


@pytest.mark.asyncio
async def test_success_on_first_attempt_does_not_sleep() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=0)

    result = await RetryExecutor(RetryPolicy(max_attempts=3, base_delay_s=0.1), sleep=sleep).run(operation)

    assert result == "sent"
    assert operation.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt_after_two_backoffs() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=2)

    result = await RetryExecutor(RetryPolicy(max_attempts=3, base_delay_s=0.1), sleep=sleep).run(operation)

    assert result == "sent"
    assert operation.calls == 3
    assert sleep.delays == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_exhaustion_after_exactly_max_attempts() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=100, error=TransportTimeoutError("Operation timed out"))

    with pytest.raises(RetryExhaustedError) as exc:
        await RetryExecutor(RetryPolicy(max_attempts=3, base_delay_s=0.1), sleep=sleep).run(operation)

    assert operation.calls == 3
    assert sleep.delays == pytest.approx([0.1, 0.2])
    assert exc.value.attempts == 3
    assert isinstance(exc.value.last_error, TransportTimeoutError)
    assert exc.value.__cause__ is exc.value.last_error
    assert "Maximum retry attempts exceeded" in str(exc.value)
    assert "timed out" in str(exc.value)


@pytest.mark.asyncio
async def test_single_attempt_policy_never_sleeps() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=1)

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(RetryPolicy(max_attempts=1, base_delay_s=0.1), sleep=sleep).run(operation)

    assert operation.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_non_domain_errors_are_not_retried() -> None:
    calls = 0

    async def broken() -> None:
        nonlocal calls
        calls += 1
        raise KeyError("bug")

    with pytest.raises(KeyError):
        await RetryExecutor(RetryPolicy(max_attempts=3, base_delay_s=0.1), sleep=RecordingSleep()).run(broken)
    assert calls == 1


@pytest.mark.asyncio
async def test_exhaustion_wraps_any_domain_error() -> None:
    operation = FlakyOperation(failures=5, error=ValidationError("nope"))

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(RetryPolicy(max_attempts=2, base_delay_s=0.1), sleep=RecordingSleep()).run(operation)
    assert operation.calls == 2


@pytest.mark.asyncio
async def test_backoff_does_not_block_other_tasks() -> None:
    events: list[str] = []

    async def flaky() -> str:
        events.append("attempt")
        if events.count("attempt") == 1:
            raise TransportSendError("Failed to send UDP message to fan")
        return "sent"

    async def ticker() -> None:
        for _ in range(3):
            events.append("tick")
            await asyncio.sleep(0.01)

    executor = RetryExecutor(RetryPolicy(max_attempts=2, base_delay_s=0.2))
    result, _ = await asyncio.gather(executor.run(flaky), ticker())

    assert result == "sent"
    assert events == ["attempt", "tick", "tick", "tick", "attempt"]


def _retry_records(caplog: pytest.LogCaptureFixture) -> list[tuple[int, str]]:
    return [
        (record.levelno, record.getMessage())
        for record in caplog.records
        if record.name == "fanctl.core.retry"
    ]


@pytest.mark.asyncio
async def test_logs_each_attempt_transition_on_eventual_success(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.DEBUG, logger="fanctl.core.retry")
    operation = FlakyOperation(failures=1)

    await RetryExecutor(RetryPolicy(max_attempts=3, base_delay_s=0.1), sleep=RecordingSleep()).run(
        operation, label="set fan speed"
    )

    records = _retry_records(caplog)
    assert [level for level, _ in records] == [
        logging.DEBUG,
        logging.WARNING,
        logging.DEBUG,
        logging.DEBUG,
    ]
    assert records[0][1] == "set fan speed: attempt 1/3 started"
    assert records[1][1].startswith("set fan speed: attempt failed, retrying attempt=1 max_attempts=3")
    assert records[2][1] == "set fan speed: attempt 2/3 started"
    assert records[3][1] == "set fan speed: succeeded on attempt 2/3"
    assert not any("exhausted" in message for _, message in records)


@pytest.mark.asyncio
async def test_logs_exhaustion_when_every_attempt_fails(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="fanctl.core.retry")
    operation = FlakyOperation(failures=100, error=TransportTimeoutError("Operation timed out"))

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(RetryPolicy(max_attempts=2, base_delay_s=0.1), sleep=RecordingSleep()).run(
            operation, label="health probe"
        )

    records = _retry_records(caplog)
    assert [level for level, _ in records] == [
        logging.DEBUG,
        logging.WARNING,
        logging.DEBUG,
        logging.ERROR,
    ]
    assert records[-1][1] == (
        "health probe: retries exhausted attempt=2 max_attempts=2 error=Operation timed out"
    )
    assert not any("succeeded" in message for _, message in records)
