"""Models for live observations and the JSON status view."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class LiveObservation(BaseModel):
    live: bool
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StatusView(BaseModel):
    live: Optional[bool] = None
    on_air_window: bool = True
    last_checked_at: Optional[datetime] = None
    offline_since: Optional[datetime] = None
    minutes_remaining: Optional[int] = None
    check_failed: bool = False
