from __future__ import annotations
import pytest
from retryop_core.core import execute, RetryConfig


class Transient(RuntimeError):
    pass


class Validation(ValueError):
    pass


@pytest.mark.asyncio
async def test_predicate_false_stops_without_on_retry():
    attempts = []
    retries = []

    async def op():
        attempts.append(1)
        raise Validation("400 bad request")

    config = RetryConfig(
        max_retries=5,
        base_delay=0.001,
        is_retryable=lambda e: not isinstance(e, Validation),
        on_retry=lambda n, e: retries.append(n),
    )
    with pytest.raises(Validation):
        await execute(op, config)
    assert len(attempts) == 1
    assert retries == []


@pytest.mark.asyncio
async def test_predicate_consulted_per_failure():
    errors = iter([Transient("t1"), Transient("t2"), Validation("v")])
    attempts = []

    async def op():
        attempts.append(1)
        raise next(errors)

    config = RetryConfig(
        max_retries=5,
        base_delay=0.001,
        is_retryable=lambda e: isinstance(e, Transient),
    )
    with pytest.raises(Validation):
        await execute(op, config)
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_non_retryable_with_raises_false_returns_default():
    async def op():
        raise Validation("nope")

    out = await execute(
        op,
        RetryConfig(is_retryable=lambda e: False),
        raises=False,
        default="fallback",
    )
    assert out == "fallback"


@pytest.mark.asyncio
async def test_exception_outside_retry_on_propagates_immediately():
    attempts = []

    async def op():
        attempts.append(1)
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await execute(op, RetryConfig(base_delay=0.001), retry_on=(Transient,))
    assert len(attempts) == 1
