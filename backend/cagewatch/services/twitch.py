"""Twitch Helix live check for a single channel."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cagewatch.auth import AppTokenProvider, MissingCredentialError
from cagewatch.config import Settings
from cagewatch.services import LiveChecker, UpstreamResponseError

logger = logging.getLogger("cagewatch.services.twitch")

HELIX_STREAMS_URL = "https://api.twitch.tv/helix/streams"


def stream_is_live(payload: object) -> bool:
    """Return True when the first entry of a Helix ``streams`` payload is live."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise UpstreamResponseError("streams response has no data list")
    streams = payload["data"]
    if not streams:
        return False
    first = streams[0]
    return isinstance(first, dict) and first.get("type") == "live"


class TwitchLiveChecker(LiveChecker):
    name = "twitch"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        tokens: Optional[AppTokenProvider] = None,
    ) -> None:
        super().__init__(settings, transport=transport)
        self.tokens = tokens or AppTokenProvider(
            settings.twitch_client_id,
            settings.twitch_client_secret,
        )

    async def is_live(self) -> bool:
        if not self.settings.twitch_user_login:
            raise MissingCredentialError("TWITCH_USER_LOGIN")

        async with self.client() as client:
            token = await self.tokens.get_token(client)
            resp = await client.get(
                HELIX_STREAMS_URL,
                params={"user_login": self.settings.twitch_user_login},
                headers={
                    "Client-Id": self.settings.twitch_client_id,
                    "Authorization": f"Bearer {token}",
                },
            )
        if resp.status_code == 401:
            logger.warning("Helix rejected the app access token; it will be refetched on the next check")
            self.tokens.invalidate()
        resp.raise_for_status()
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamResponseError("streams response is not JSON") from exc
        return stream_is_live(payload)
