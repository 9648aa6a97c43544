from __future__ import annotations
import asyncio

# 408 request timeout, 425 too early, 429 rate limited, 5xx gateway/backend hiccups
RETRYABLE_STATUSES = frozenset({408, 425, 429, 500, 502, 503, 504})

_TRANSIENT_NAMES = {
    "ConnectError",
    "ConnectTimeout",
    "ReadTimeout",
    "WriteTimeout",
    "PoolTimeout",
    "ReadError",
    "RemoteProtocolError",
    "TimeoutException",
    "TimeoutError",
    "ConnectionError",
    "ClientConnectionError",
    "ClientConnectorError",
    "ServerDisconnectedError",
    "ServerTimeoutError",
}

_TRANSIENT_FRAGMENTS = (
    "timed out",
    "timeout",
    "connection reset",
    "connection refused",
    "connection aborted",
    "temporarily unavailable",
    "network is unreachable",
    "server disconnected",
)


def status_of(exc: BaseException) -> int | None:
    """Best-effort HTTP status extraction for httpx/requests/aiohttp-shaped errors."""
    resp = getattr(exc, "response", None)
    for candidate in (
        getattr(resp, "status_code", None),
        getattr(exc, "status_code", None),
        getattr(exc, "status", None),
        getattr(resp, "status", None),
    ):
        try:
            if candidate is not None:
                return int(candidate)
        except (TypeError, ValueError):
            continue
    return None


def http_classifier(exc: BaseException) -> bool:
    status = status_of(exc)
    if status is not None:
        return status in RETRYABLE_STATUSES

    # ---- connection-level failures ----
    if isinstance(exc, (OSError, asyncio.TimeoutError)):
        return True
    names = {cls.__name__ for cls in type(exc).__mro__}
    if names & _TRANSIENT_NAMES:
        return True

    msg = str(exc).lower()
    return any(t in msg for t in _TRANSIENT_FRAGMENTS)
