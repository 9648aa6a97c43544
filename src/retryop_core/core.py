from __future__ import annotations
import asyncio
import dataclasses
import inspect
import logging
import random
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Type

from .cancel import CancelToken
from .errors import RetryCancelledError
from .types import OnRetryFn, Operation, PreAttemptFn, RetryablePredicate

logger = logging.getLogger(__name__)

JITTER_MODES = ("none", "full", "decorrelated")
_MAX_EXPONENT = 1000


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    on_retry: Optional[OnRetryFn] = None
    jitter: str = "none"
    is_retryable: Optional[RetryablePredicate] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be > 0")
        if self.max_delay <= 0:
            raise ValueError("max_delay must be > 0")
        if self.base_delay > self.max_delay:
            raise ValueError("base_delay must be <= max_delay")
        if self.jitter not in JITTER_MODES:
            raise ValueError(f"jitter must be one of {JITTER_MODES}, got {self.jitter!r}")

    def delay_for(self, attempt: int, previous: Optional[float] = None) -> float:
        """Delay before the retry that follows ``attempt`` completed attempts (zero-based)."""
        # 2**1024 no longer converts to float; anything that large is capped anyway
        if attempt >= _MAX_EXPONENT:
            capped = self.max_delay
        else:
            capped = min(self.base_delay * (2**attempt), self.max_delay)
        if self.jitter == "full":
            return random.uniform(0.0, capped)
        if self.jitter == "decorrelated":
            prev = self.base_delay if previous is None else previous
            return min(self.max_delay, random.uniform(self.base_delay, prev * 3))
        return capped

    def delays(self) -> Iterator[float]:
        prev: Optional[float] = None
        for attempt in range(self.max_retries):
            prev = self.delay_for(attempt, prev)
            yield prev

    def with_overrides(self, **changes: Any) -> "RetryConfig":
        return dataclasses.replace(self, **changes)


class _Cancelled(Exception):
    pass


async def _race(aw, cancel_token: Optional[CancelToken]):
    """Await ``aw`` unless the token fires first, in which case ``aw`` is cancelled."""
    if cancel_token is None:
        return await aw
    task = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(cancel_token.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        task.cancel()
        raise
    finally:
        waiter.cancel()
    if task in done:
        return task.result()
    task.cancel()
    with suppress(asyncio.CancelledError, Exception):
        await task
    raise _Cancelled()


async def _pause(delay: float, cancel_token: Optional[CancelToken]) -> None:
    if cancel_token is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_token.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return
    raise _Cancelled()


async def _notify(on_retry: OnRetryFn, attempt: int, error: BaseException) -> None:
    # observer failures are logged and never alter the retry sequence
    try:
        res = on_retry(attempt, error)
        if inspect.isawaitable(res):
            await res
    except Exception:
        logger.warning("on_retry observer raised for retry %d; ignoring", attempt, exc_info=True)


async def execute(
    operation: Operation,
    config: Optional[RetryConfig] = None,
    *,
    args: tuple = (),
    kwargs: dict[str, Any] | None = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    raises: bool = True,
    default: Any = None,
    pre_attempt: Optional[PreAttemptFn] = None,
    attempt_timeout_s: float | None = None,
    cancel_token: Optional[CancelToken] = None,
) -> Any:
    """Run ``operation`` with capped exponential backoff.

    The operation is attempted once plus up to ``config.max_retries`` times.
    On exhaustion the error of the last attempt is raised (or ``default`` is
    returned when ``raises`` is False). A fired ``cancel_token`` interrupts
    both a running attempt and a pending delay with ``RetryCancelledError``.
    """
    config = config or RetryConfig()
    kwargs = kwargs or {}
    op_name = getattr(operation, "__qualname__", repr(operation))

    async def _call():
        res = operation(*args, **kwargs)
        return await res if inspect.isawaitable(res) else res

    async def _once():
        if pre_attempt:
            await pre_attempt()
        if attempt_timeout_s is None:
            return await _call()
        return await asyncio.wait_for(_call(), timeout=attempt_timeout_s)

    def _cancelled(started: int, last: Optional[BaseException]) -> RetryCancelledError:
        reason = cancel_token.reason if cancel_token else None
        logger.warning("%s: retry sequence cancelled after %d attempt(s)", op_name, started)
        return RetryCancelledError(reason, attempts=started, last_error=last)

    attempt = 0
    last_error: Optional[BaseException] = None
    previous_delay: Optional[float] = None

    while attempt <= config.max_retries:
        if cancel_token is not None and cancel_token.cancelled:
            raise _cancelled(attempt, last_error)
        try:
            result = await _race(_once(), cancel_token)
        except _Cancelled:
            raise _cancelled(attempt + 1, last_error) from None
        except retry_on as exc:
            last_error = exc
            if config.is_retryable is not None and not config.is_retryable(exc):
                logger.debug("%s: %r is not retryable, giving up", op_name, exc)
                break
            if attempt >= config.max_retries:
                break
            delay = config.delay_for(attempt, previous_delay)
            previous_delay = delay
            logger.debug(
                "%s: attempt %d failed (%r); retry %d in %.3fs",
                op_name,
                attempt + 1,
                exc,
                attempt + 1,
                delay,
            )
            if config.on_retry is not None:
                await _notify(config.on_retry, attempt + 1, exc)
            try:
                await _pause(delay, cancel_token)
            except _Cancelled:
                raise _cancelled(attempt + 1, last_error) from None
            attempt += 1
        except Exception:
            if raises:
                raise
            return default
        else:
            if attempt:
                logger.info("%s: succeeded after %d retries", op_name, attempt)
            return result

    logger.warning("%s: giving up after %d attempt(s): %r", op_name, attempt + 1, last_error)
    if raises:
        raise last_error
    return default


async def retry_request(operation: Operation, config: Optional[RetryConfig] = None, **kw: Any) -> Any:
    """Alias of :func:`execute` under the name REST call sites use."""
    return await execute(operation, config, **kw)
