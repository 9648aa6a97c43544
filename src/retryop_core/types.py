from __future__ import annotations
from typing import Any, Awaitable, Callable, Optional


# The unit of work being retried; may return a value or an awaitable.
Operation = Callable[..., Any]

# Observer invoked before each retry with (1-based retry number, error).
# Plain functions and coroutine functions are both accepted.
OnRetryFn = Callable[[int, BaseException], Optional[Awaitable[None]]]

# Called before each attempt (e.g., refresh an auth header)
PreAttemptFn = Callable[[], Awaitable[None]]

# Decide if an exception is worth another attempt
RetryablePredicate = Callable[[BaseException], bool]
