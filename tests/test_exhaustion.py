from __future__ import annotations
import pytest
from retryop_core.core import execute, retry_request, RetryConfig


class Always(RuntimeError):
    pass


@pytest.mark.asyncio
async def test_exhaustion_raises_last_error():
    raised = []
    retries = []

    async def fail():
        exc = Always(f"nope {len(raised) + 1}")
        raised.append(exc)
        raise exc

    config = RetryConfig(
        max_retries=3,
        base_delay=0.001,
        max_delay=0.002,
        on_retry=lambda n, e: retries.append(n),
    )
    with pytest.raises(Always) as ei:
        await execute(fail, config)

    assert len(raised) == 4
    assert ei.value is raised[-1]
    assert str(ei.value) == "nope 4"
    assert retries == [1, 2, 3]


@pytest.mark.asyncio
async def test_zero_retries_is_single_attempt():
    calls = []
    retries = []

    async def fail():
        calls.append(1)
        raise Always("only once")

    config = RetryConfig(max_retries=0, on_retry=lambda n, e: retries.append(n))
    with pytest.raises(Always, match="only once"):
        await execute(fail, config)
    assert len(calls) == 1
    assert retries == []


@pytest.mark.asyncio
async def test_zero_retries_success():
    async def ok():
        return 1

    assert await execute(ok, RetryConfig(max_retries=0)) == 1


@pytest.mark.asyncio
async def test_returns_default_on_exhaustion_when_raises_false():
    async def fail():
        raise Always("nope")

    config = RetryConfig(max_retries=2, base_delay=0.001, max_delay=0.002)
    out = await execute(fail, config, retry_on=(Always,), raises=False, default={"ok": False})
    assert out == {"ok": False}


@pytest.mark.asyncio
async def test_retry_request_alias():
    calls = []

    async def fail():
        calls.append(1)
        raise Always("x")

    with pytest.raises(Always):
        await retry_request(fail, RetryConfig(max_retries=1, base_delay=0.001))
    assert len(calls) == 2
