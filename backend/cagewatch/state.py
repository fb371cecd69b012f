"""In-memory status cache shared by the request gate and the live checkers."""

from __future__ import annotations

from datetime import datetime
from typing import Any


class StatusState:
    """Last rendered status plus the timestamps the countdown is derived from.

    ``offline_since`` is set on the first not-live observation after a live
    one and stays fixed until the channel is seen live again.
    """

    def __init__(self) -> None:
        self.last_status: str = ""
        self.last_checked_at: datetime | None = None
        self.offline_since: datetime | None = None
        self.check_failed: bool = False
        self.last_error: str | None = None

    def read(self) -> str:
        return self.last_status

    def write(self, status_text: str) -> None:
        self.last_status = status_text
        self.check_failed = False
        self.last_error = None

    def mark_checked(self, now: datetime) -> None:
        self.last_checked_at = now

    def mark_offline(self, now: datetime) -> datetime:
        if self.offline_since is None:
            self.offline_since = now
        return self.offline_since

    def mark_live(self) -> None:
        self.offline_since = None

    def mark_failed(self, error: str) -> None:
        self.check_failed = True
        self.last_error = error

    def reset(self) -> None:
        self.last_status = ""
        self.last_checked_at = None
        self.offline_since = None
        self.check_failed = False
        self.last_error = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "last_status": self.last_status,
            "last_checked_at": self.last_checked_at,
            "offline_since": self.offline_since,
            "check_failed": self.check_failed,
            "last_error": self.last_error,
        }
