from __future__ import annotations
import asyncio
from typing import Optional


class CancelToken:
    """Cooperative cancellation signal for a retry sequence.

    One token may be shared by several ``execute`` calls; firing it stops all
    of them. Must be created and used on the same event loop.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    async def wait(self) -> None:
        await self._event.wait()
