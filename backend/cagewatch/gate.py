"""Request gate: decides per request whether to refresh the live status."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from cagewatch.auth import MissingCredentialError
from cagewatch.config import Settings
from cagewatch.models import StatusView
from cagewatch.schedule import is_on_air, schedule_message
from cagewatch.services import (
    LiveChecker,
    UpstreamResponseError,
    apply_observation,
    minutes_remaining,
    render_link,
)
from cagewatch.state import StatusState

logger = logging.getLogger("cagewatch.gate")

UNAVAILABLE_MESSAGE = "Live status is not available yet."
CHECK_FAILURES = (httpx.HTTPError, UpstreamResponseError, MissingCredentialError)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def seconds_since(then: datetime, now: datetime) -> int:
    """Whole seconds between two instants, rounding halves up."""
    return int(math.floor((now - then).total_seconds() + 0.5))


class StatusGate:
    """Owns the status cache and runs at most one live check at a time.

    A check starts only when ``check_interval_seconds`` have passed since the
    previous one; ``last_checked_at`` is stamped before the upstream call so
    requests arriving meanwhile join the running check instead of starting
    another.
    """

    def __init__(
        self,
        settings: Settings,
        checker: LiveChecker,
        state: Optional[StatusState] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings
        self.checker = checker
        self.state = state or StatusState()
        self._clock = clock
        self._inflight: Optional[asyncio.Future] = None
        self.checks_started = 0

    def on_air(self, now: datetime) -> bool:
        if not self.settings.schedule_enabled:
            return True
        return is_on_air(now, self.settings.timezone)

    def check_due(self, now: datetime) -> bool:
        last = self.state.last_checked_at
        if last is None:
            return True
        return (now - last).total_seconds() >= self.settings.check_interval_seconds

    async def handle(self, now: Optional[datetime] = None) -> str:
        now = now or self._clock()
        if not self.on_air(now):
            return schedule_message(self.settings.streamer_name, render_link(self.settings))
        await self.refresh_if_due(now)
        return self.render(now)

    async def refresh_if_due(self, now: datetime) -> bool:
        """Run or join a live check when one is due; return True if a check ran."""
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)
            return True
        if not self.check_due(now):
            return False

        self.state.mark_checked(now)
        self.checks_started += 1
        self._inflight = asyncio.ensure_future(self._run_check(now))
        self._inflight.add_done_callback(self._log_unexpected_failure)
        await asyncio.shield(self._inflight)
        return True

    def _log_unexpected_failure(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Live check via %s crashed", self.checker.name, exc_info=exc)

    async def _run_check(self, now: datetime) -> None:
        try:
            observation = await self.checker.check(now)
        except CHECK_FAILURES as exc:
            logger.warning("Live check via %s failed (%s): %s", self.checker.name, exc.__class__.__name__, exc)
            self.state.mark_failed(exc.__class__.__name__)
            return
        status_text = apply_observation(self.state, observation, self.settings)
        logger.info(
            "Live check via %s live=%s offline_since=%s",
            self.checker.name,
            observation.live,
            self.state.offline_since.isoformat() if self.state.offline_since else None,
        )
        logger.debug("Status now: %s", status_text)

    def render(self, now: datetime) -> str:
        message = self.state.read() or UNAVAILABLE_MESSAGE
        last = self.state.last_checked_at
        seconds = seconds_since(last, now) if last is not None else 0
        if self.state.check_failed:
            return (
                f"{message} (last checked: {seconds} seconds ago; "
                "latest check failed, showing last known status)"
            )
        return f"{message} (last checked: {seconds} seconds ago)"

    def view(self, now: Optional[datetime] = None) -> StatusView:
        now = now or self._clock()
        snapshot = self.state.snapshot()
        offline_since = snapshot["offline_since"]
        remaining = None
        if offline_since is not None:
            remaining = max(0, minutes_remaining(offline_since, now, self.settings.offline_buffer_seconds))
        return StatusView(
            live=(offline_since is None) if snapshot["last_status"] else None,
            on_air_window=self.on_air(now),
            last_checked_at=snapshot["last_checked_at"],
            offline_since=offline_since,
            minutes_remaining=remaining,
            check_failed=snapshot["check_failed"],
        )
