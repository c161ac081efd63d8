"""Tests for the constant-delay retry primitive."""

from __future__ import annotations

import asyncio

import pytest

from conftest import RecordingSleep
from core.domain.models import RetryPolicy
from core.retry import retry, retry_with_policy


class FlakyOperation:
    """Fails `failures` times with a numbered error, then returns "ok"."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"attempt {self.calls} failed")
        return "ok"


class TestRetrySuccess:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [1, 2, 5])
    async def test_succeeds_on_last_allowed_attempt(self, max_attempts: int, sleep: RecordingSleep) -> None:
        operation = FlakyOperation(failures=max_attempts - 1)

        result = await retry(operation, 250, max_attempts, sleep=sleep)

        assert result == "ok"
        assert operation.calls == max_attempts
        assert sleep.delays == [0.25] * (max_attempts - 1)

    @pytest.mark.asyncio
    async def test_first_success_does_not_wait(self, sleep: RecordingSleep) -> None:
        operation = FlakyOperation(failures=0)

        assert await retry(operation, 10_000, 10, sleep=sleep) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retry_with_policy(self, sleep: RecordingSleep) -> None:
        operation = FlakyOperation(failures=2)

        result = await retry_with_policy(operation, RetryPolicy(delay_ms=5_000, max_attempts=4), sleep=sleep)

        assert result == "ok"
        assert operation.calls == 3
        assert sleep.delays == [5.0, 5.0]


class TestRetryExhaustion:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [1, 3, 4])
    async def test_reraises_error_from_final_attempt(self, max_attempts: int, sleep: RecordingSleep) -> None:
        operation = FlakyOperation(failures=max_attempts + 10)

        with pytest.raises(RuntimeError, match=f"attempt {max_attempts} failed"):
            await retry(operation, 100, max_attempts, sleep=sleep)

        assert operation.calls == max_attempts
        assert len(sleep.delays) == max_attempts - 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [0, -1])
    async def test_rejects_non_positive_attempts_without_calling(
        self, max_attempts: int, sleep: RecordingSleep
    ) -> None:
        operation = FlakyOperation(failures=0)

        with pytest.raises(ValueError, match="max_attempts"):
            await retry(operation, 100, max_attempts, sleep=sleep)

        assert operation.calls == 0

    @pytest.mark.asyncio
    async def test_rejects_negative_delay(self, sleep: RecordingSleep) -> None:
        operation = FlakyOperation(failures=0)

        with pytest.raises(ValueError, match="delay_ms"):
            await retry(operation, -1, 3, sleep=sleep)

        assert operation.calls == 0


@pytest.mark.asyncio
async def test_waiting_operation_does_not_block_others() -> None:
    """While one sequence sleeps between attempts, another one completes."""
    order: list[str] = []
    slow = FlakyOperation(failures=1)

    async def fast() -> str:
        order.append("fast")
        return "fast"

    async def slow_logged() -> str:
        result = await slow()
        order.append("slow")
        return result

    results = await asyncio.gather(retry(slow_logged, 20, 2), retry(fast, 20, 2))

    assert results == ["ok", "fast"]
    assert order == ["fast", "slow"]
