from __future__ import annotations
from typing import Optional


class RetryCancelledError(Exception):
    """Raised by ``execute`` when its cancel token fires.

    ``attempts`` is the number of attempts that were started before the
    cancellation, ``last_error`` the most recent operation failure (if any).
    """

    def __init__(
        self,
        reason: Optional[str] = None,
        *,
        attempts: int = 0,
        last_error: Optional[BaseException] = None,
    ) -> None:
        msg = "retry sequence cancelled"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.reason = reason
        self.attempts = attempts
        self.last_error = last_error
