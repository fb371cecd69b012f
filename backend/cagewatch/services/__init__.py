"""Shared pieces for live checks and for turning observations into status text."""

from __future__ import annotations

import html
import logging
import math
from datetime import datetime
from typing import Optional

import httpx

from cagewatch.config import Settings
from cagewatch.log_redact import httpx_event_hooks
from cagewatch.models import LiveObservation
from cagewatch.state import StatusState

logger = logging.getLogger("cagewatch.services")


class UpstreamResponseError(Exception):
    """Raised when the upstream answers with a body we cannot classify."""


class LiveChecker:
    """Base class for a single live-status lookup against one upstream."""

    name = "base"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport

    def client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout=self.settings.request_timeout_seconds),
            transport=self._transport,
            event_hooks=httpx_event_hooks(),
            **kwargs,
        )

    async def is_live(self) -> bool:
        raise NotImplementedError

    async def check(self, now: datetime) -> LiveObservation:
        live = await self.is_live()
        logger.debug("Checked %s live status: %s", self.name, live)
        return LiveObservation(live=live, checked_at=now)


def render_link(settings: Settings) -> str:
    url = settings.streaming_url
    if not settings.anchor_links:
        return url
    escaped = html.escape(url, quote=True)
    return f"<a href='{escaped}'>{escaped}</a>"


def minutes_remaining(offline_since: datetime, now: datetime, buffer_seconds: int) -> int:
    seconds_elapsed = (now - offline_since).total_seconds()
    return math.ceil((buffer_seconds - seconds_elapsed) / 60)


def live_message(settings: Settings) -> str:
    return f"User is live at {render_link(settings)}."


def countdown_message(settings: Settings, minutes: int) -> str:
    unit = "minute" if minutes == 1 else "minutes"
    return (
        f"{settings.streamer_name} is not live at {render_link(settings)}; "
        f"the gift card will be revealed if they fail to go live in {minutes} {unit}."
    )


def reveal_message(settings: Settings) -> str:
    buffer_minutes = settings.offline_buffer_seconds // 60
    return (
        f"{settings.streamer_name} has not been live at {render_link(settings)} "
        f"for {buffer_minutes} minutes. Gift card code: {settings.gift_card_code}"
    )


def offline_message(state: StatusState, settings: Settings, now: datetime) -> str:
    offline_since = state.offline_since or now
    remaining = minutes_remaining(offline_since, now, settings.offline_buffer_seconds)
    if remaining > 0:
        return countdown_message(settings, remaining)
    return reveal_message(settings)


def apply_observation(state: StatusState, observation: LiveObservation, settings: Settings) -> str:
    """Update the cache from one observation and return the new status text."""
    if observation.live:
        state.mark_live()
        state.write(live_message(settings))
        return state.read()

    state.mark_offline(observation.checked_at)
    state.write(offline_message(state, settings, observation.checked_at))
    return state.read()


def build_checker(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> LiveChecker:
    if settings.variant == "page":
        from cagewatch.services.page import PageLiveChecker

        return PageLiveChecker(settings, transport=transport)

    from cagewatch.services.twitch import TwitchLiveChecker

    return TwitchLiveChecker(settings, transport=transport)
