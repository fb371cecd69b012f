"""Twitch app access tokens via the OAuth client-credentials grant.

Client secrets and tokens are read from settings at runtime and are
**never** logged or returned via any API.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx

from cagewatch.services import UpstreamResponseError

logger = logging.getLogger("cagewatch.auth")

TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
EXPIRY_MARGIN_SECONDS = 60
DEFAULT_EXPIRES_IN = 3600


class MissingCredentialError(Exception):
    """Raised when a required credential setting is empty."""

    def __init__(self, env_name: str) -> None:
        self.env_name = env_name
        super().__init__(f"Environment variable {env_name!r} is not set")


class AppTokenProvider:
    """Caches one app access token until shortly before it expires."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: str = TWITCH_TOKEN_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    def _require_credentials(self) -> None:
        if not self.client_id:
            raise MissingCredentialError("TWITCH_CLIENT_ID")
        if not self.client_secret:
            raise MissingCredentialError("TWITCH_CLIENT_SECRET")

    @property
    def has_valid_token(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at - EXPIRY_MARGIN_SECONDS

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_token(self, client: httpx.AsyncClient) -> str:
        if self.has_valid_token:
            return self._token  # type: ignore[return-value]

        self._require_credentials()
        resp = await client.post(
            self.token_url,
            params={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
            },
        )
        resp.raise_for_status()
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamResponseError("token response is not JSON") from exc
        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            raise UpstreamResponseError("token response has no access_token")

        expires_in = body.get("expires_in", DEFAULT_EXPIRES_IN)
        if not isinstance(expires_in, (int, float)):
            expires_in = DEFAULT_EXPIRES_IN
        self._token = token
        self._expires_at = self._clock() + float(expires_in)
        logger.info("Twitch app access token acquired (expires_in=%ss)", int(expires_in))
        return token
