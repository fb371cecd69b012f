"""Configuration — reads all settings from environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_secret(name: str, default: str = "") -> str:
    """Resolve a secret from ``NAME`` or from the file named by ``NAME_FILE``."""
    value = os.getenv(name)
    if value:
        return value

    file_path = (os.getenv(f"{name}_FILE") or "").strip()
    if not file_path:
        return default
    try:
        return Path(file_path).read_text(encoding="utf-8").strip() or default
    except OSError:
        return default


CHECK_VARIANT: str = os.getenv("CHECK_VARIANT", "twitch").strip().lower()
_IS_TWITCH = CHECK_VARIANT == "twitch"

STREAMING_URL: str = os.getenv("STREAMING_URL", "")
STREAMER_NAME: str = os.getenv("STREAMER_NAME", "The streamer")
GIFT_CARD_CODE: str = get_secret("GIFT_CARD_CODE")

# Twitch (variant A)
TWITCH_USER_LOGIN: str = os.getenv("TWITCH_USER_LOGIN", "")
TWITCH_CLIENT_ID: str = os.getenv("TWITCH_CLIENT_ID", "")
TWITCH_CLIENT_SECRET: str = get_secret("TWITCH_CLIENT_SECRET")

# Public page (variant B)
CHANNEL_PAGE_URL: str = os.getenv("CHANNEL_PAGE_URL", "") or STREAMING_URL

TIMEZONE: str = os.getenv("TIMEZONE", "America/Toronto")
SCHEDULE_ENABLED: bool = _env_bool("SCHEDULE_ENABLED", _IS_TWITCH)
ANCHOR_LINKS: bool = _env_bool("ANCHOR_LINKS", _IS_TWITCH)

CHECK_INTERVAL_SECONDS: float = float(os.getenv("CHECK_INTERVAL_SECONDS", "60"))
OFFLINE_BUFFER_SECONDS: int = int(os.getenv("OFFLINE_BUFFER_SECONDS", "900"))
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

RATE_LIMIT_MAX: int = int(os.getenv("RATE_LIMIT_MAX", "3"))
RATE_LIMIT_WINDOW_SECONDS: float = float(
    os.getenv("RATE_LIMIT_WINDOW_SECONDS", "10" if _IS_TWITCH else "60")
)
CORS_ORIGINS: list[str] = _env_csv("CORS_ORIGINS", "*")
PORT: int = int(os.getenv("PORT", "3000"))


class Settings(BaseModel):
    """Runtime settings handed to the gate and the checkers."""

    variant: Literal["twitch", "page"] = "twitch"
    streaming_url: str = ""
    streamer_name: str = "The streamer"
    gift_card_code: str = ""
    twitch_user_login: str = ""
    twitch_client_id: str = ""
    twitch_client_secret: str = ""
    channel_page_url: str = ""
    timezone: str = "America/Toronto"
    schedule_enabled: bool = True
    anchor_links: bool = True
    check_interval_seconds: float = Field(default=60.0, ge=0)
    offline_buffer_seconds: int = Field(default=900, ge=0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def _default_page_url(self):
        if not self.channel_page_url:
            self.channel_page_url = self.streaming_url
        return self

    def missing_settings(self) -> list[str]:
        """Names of environment variables the selected variant needs but lacks."""
        required = {
            "STREAMING_URL": self.streaming_url,
            "GIFT_CARD_CODE": self.gift_card_code,
        }
        if self.variant == "twitch":
            required.update(
                {
                    "TWITCH_USER_LOGIN": self.twitch_user_login,
                    "TWITCH_CLIENT_ID": self.twitch_client_id,
                    "TWITCH_CLIENT_SECRET": self.twitch_client_secret,
                }
            )
        else:
            required["CHANNEL_PAGE_URL"] = self.channel_page_url
        return [name for name, value in required.items() if not value]


def load_settings() -> Settings:
    return Settings(
        variant="page" if CHECK_VARIANT == "page" else "twitch",
        streaming_url=STREAMING_URL,
        streamer_name=STREAMER_NAME,
        gift_card_code=GIFT_CARD_CODE,
        twitch_user_login=TWITCH_USER_LOGIN,
        twitch_client_id=TWITCH_CLIENT_ID,
        twitch_client_secret=TWITCH_CLIENT_SECRET,
        channel_page_url=CHANNEL_PAGE_URL,
        timezone=TIMEZONE,
        schedule_enabled=SCHEDULE_ENABLED,
        anchor_links=ANCHOR_LINKS,
        check_interval_seconds=CHECK_INTERVAL_SECONDS,
        offline_buffer_seconds=OFFLINE_BUFFER_SECONDS,
        request_timeout_seconds=REQUEST_TIMEOUT_SECONDS,
    )
