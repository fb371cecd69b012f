"""Weekly on-air schedule used to suppress checks outside streaming hours."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class ScheduleWindow:
    start_minute: int
    end_minute: int

    def contains(self, minute_of_day: int) -> bool:
        return self.start_minute <= minute_of_day <= self.end_minute

    @staticmethod
    def label(minute_of_day: int) -> str:
        hour, minute = divmod(minute_of_day, 60)
        suffix = "am" if hour < 12 else "pm"
        return f"{(hour % 12) or 12}:{minute:02d}{suffix}"

    def describe(self) -> str:
        return f"from {self.label(self.start_minute)} to {self.label(self.end_minute)}"


WEEKDAY_WINDOW = ScheduleWindow(start_minute=16 * 60 + 30, end_minute=21 * 60 + 30)
WEEKEND_WINDOW = ScheduleWindow(start_minute=8 * 60 + 30, end_minute=21 * 60 + 30)


def window_for(local_now: datetime) -> ScheduleWindow:
    if local_now.weekday() in (SATURDAY, SUNDAY):
        return WEEKEND_WINDOW
    return WEEKDAY_WINDOW


def is_on_air(now: datetime, tz_name: str) -> bool:
    """Whether ``now`` falls inside the on-air window in the ``tz_name`` zone."""
    local_now = now.astimezone(ZoneInfo(tz_name))
    minute_of_day = local_now.hour * 60 + local_now.minute
    return window_for(local_now).contains(minute_of_day)


def schedule_message(name: str, link: str) -> str:
    return (
        f"{name} isn't currently obliged to be streaming at {link}. "
        f"They're scheduled to be live {WEEKDAY_WINDOW.describe()} on weekdays, "
        f"and {WEEKEND_WINDOW.describe()} on weekends. "
        "If they aren't live by then, you'll receive compensation "
        "(in the form of a gift card code) for your trouble ;)"
    )
