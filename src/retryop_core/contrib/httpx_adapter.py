from __future__ import annotations
import asyncio
from typing import Any, Optional

import httpx

from ..cancel import CancelToken
from ..classify import RETRYABLE_STATUSES, http_classifier
from ..core import RetryConfig, execute


def _with_classifier(config: Optional[RetryConfig]) -> RetryConfig:
    config = config or RetryConfig()
    if config.is_retryable is None:
        config = config.with_overrides(is_retryable=http_classifier)
    return config


async def request_async(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    config: Optional[RetryConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    attempt_timeout_s: float | None = None,
    **request_kwargs: Any,
) -> httpx.Response:
    """
    Issue one request per attempt on an AsyncClient.
      - non-2xx responses raise inside the attempt (raise_for_status)
      - http_classifier decides retryability unless the config has a predicate
    """

    async def _send() -> httpx.Response:
        resp = await client.request(method, url, **request_kwargs)
        resp.raise_for_status()
        return resp

    return await execute(
        _send,
        _with_classifier(config),
        attempt_timeout_s=attempt_timeout_s,
        cancel_token=cancel_token,
    )


async def request_sync(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    config: Optional[RetryConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    attempt_timeout_s: float | None = None,
    **request_kwargs: Any,
) -> httpx.Response:
    """Same as request_async for a blocking Client; each attempt runs in a worker thread."""

    def _send() -> httpx.Response:
        resp = client.request(method, url, **request_kwargs)
        resp.raise_for_status()
        return resp

    return await execute(
        lambda: asyncio.to_thread(_send),
        _with_classifier(config),
        attempt_timeout_s=attempt_timeout_s,
        cancel_token=cancel_token,
    )


def retry_status_hook(response: httpx.Response) -> None:
    """
    httpx.Client response event hook: raise only for statuses worth retrying,
    leaving permanent 4xx responses for the caller to inspect.
    """
    if response.status_code in RETRYABLE_STATUSES:
        raise httpx.HTTPStatusError(
            f"retryable status {response.status_code} for {response.request.url}",
            request=response.request,
            response=response,
        )


async def retry_status_hook_async(response: httpx.Response) -> None:
    # AsyncClient event hooks must be coroutines
    retry_status_hook(response)
