from __future__ import annotations
import os
import asyncio
import logging

import httpx
from dotenv import load_dotenv

from retryop_core import CancelToken, RetryCancelledError
from retryop_core.contrib.httpx_adapter import request_async
from retryop_core.settings import config_from_env

load_dotenv()
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000/api")


def show_status(attempt: int, error: BaseException) -> None:
    # what a screen would render as "Retrying... attempt N"
    print(f"Retrying... attempt {attempt} ({error!r})")


async def fetch_matches(client: httpx.AsyncClient, token: CancelToken) -> list:
    resp = await request_async(
        client,
        "GET",
        "/matches",
        params={"page": 1, "limit": 20},
        config=config_from_env(on_retry=show_status, jitter="full"),
        cancel_token=token,
        attempt_timeout_s=5.0,
    )
    return resp.json().get("data", [])


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    token = CancelToken()
    # give up entirely after 20s, as if the user navigated away
    asyncio.get_running_loop().call_later(20, token.cancel, "screen closed")

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=10.0) as client:
        try:
            matches = await fetch_matches(client, token)
            print("Matches:", len(matches))
        except RetryCancelledError as exc:
            print(f"Cancelled after {exc.attempts} attempt(s): {exc.reason}")
        except httpx.HTTPError as exc:
            print(f"Request failed: {exc!r}")


if __name__ == "__main__":
    asyncio.run(main())
