from __future__ import annotations
import itertools
import pytest
from retryop_core.core import execute, RetryConfig


class Boom(RuntimeError):
    pass


@pytest.mark.asyncio
async def test_first_attempt_success_calls_once():
    calls = []
    retries = []

    async def op():
        calls.append(1)
        return "profile"

    out = await execute(op, RetryConfig(on_retry=lambda n, e: retries.append(n)))
    assert out == "profile"
    assert len(calls) == 1
    assert retries == []


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [1, 2, 3])
async def test_retries_then_succeeds(k):
    calls = itertools.count()
    seen = []

    async def sometimes(x):
        i = next(calls)
        if i < k:
            raise Boom(f"boom {i}")
        return x * 2

    config = RetryConfig(
        max_retries=3,
        base_delay=0.001,
        max_delay=0.002,
        on_retry=lambda n, e: seen.append((n, str(e))),
    )
    out = await execute(sometimes, config, args=(21,))
    assert out == 42
    assert next(calls) == k + 1  # k failures + 1 success were consumed
    assert [n for n, _ in seen] == list(range(1, k + 1))
    assert [msg for _, msg in seen] == [f"boom {i}" for i in range(k)]


@pytest.mark.asyncio
async def test_sync_operation_is_supported():
    calls = itertools.count()

    def op(a, b=0):
        if next(calls) == 0:
            raise Boom("first")
        return a + b

    out = await execute(op, RetryConfig(base_delay=0.001), args=(1,), kwargs={"b": 2})
    assert out == 3
