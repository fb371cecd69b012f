from datetime import datetime, timedelta, timezone

from cagewatch.config import Settings
from cagewatch.models import LiveObservation
from cagewatch.services import apply_observation, minutes_remaining, render_link
from cagewatch.state import StatusState

T0 = datetime(2026, 10, 20, 21, 0, tzinfo=timezone.utc)
ANCHOR = "<a href='https://twitch.tv/example'>https://twitch.tv/example</a>"


def _settings(**overrides) -> Settings:
    values = {
        "streaming_url": "https://twitch.tv/example",
        "streamer_name": "Leon",
        "gift_card_code": "GIFT-1234",
    }
    values.update(overrides)
    return Settings(**values)


def _observe(state: StatusState, live: bool, at: datetime, settings: Settings | None = None) -> str:
    return apply_observation(state, LiveObservation(live=live, checked_at=at), settings or _settings())


def test_live_observation_renders_anchor_and_clears_offline_since():
    state = StatusState()
    state.offline_since = T0 - timedelta(minutes=3)

    message = _observe(state, True, T0)

    assert message == f"User is live at {ANCHOR}."
    assert state.offline_since is None


def test_plain_link_when_anchors_disabled():
    settings = _settings(anchor_links=False, streaming_url="https://youtube.com/@example/live")
    assert render_link(settings) == "https://youtube.com/@example/live"


def test_anchor_link_escapes_quotes():
    settings = _settings(streaming_url="https://example.test/?a='b'")
    assert "'b'" not in render_link(settings)


def test_first_offline_observation_starts_full_countdown():
    state = StatusState()

    message = _observe(state, False, T0)

    assert state.offline_since == T0
    assert message == (
        f"Leon is not live at {ANCHOR}; the gift card will be revealed "
        "if they fail to go live in 15 minutes."
    )


def test_offline_since_is_fixed_across_offline_observations():
    state = StatusState()
    _observe(state, False, T0)
    _observe(state, False, T0 + timedelta(minutes=4))
    message = _observe(state, False, T0 + timedelta(minutes=5))

    assert state.offline_since == T0
    assert "in 10 minutes." in message


def test_exactly_one_minute_is_singular():
    state = StatusState()
    _observe(state, False, T0)

    message = _observe(state, False, T0 + timedelta(minutes=14, seconds=30))

    assert "in 1 minute." in message
    assert "1 minutes" not in message


def test_code_revealed_once_buffer_has_elapsed():
    state = StatusState()
    _observe(state, False, T0)

    at_boundary = _observe(state, False, T0 + timedelta(minutes=15))
    later = _observe(state, False, T0 + timedelta(minutes=20))

    expected = f"Leon has not been live at {ANCHOR} for 15 minutes. Gift card code: GIFT-1234"
    assert at_boundary == expected
    assert later == expected


def test_countdown_decreases_as_time_advances():
    remaining = [
        minutes_remaining(T0, T0 + timedelta(minutes=m), 900)
        for m in range(0, 16)
    ]

    assert remaining == sorted(remaining, reverse=True)
    assert remaining[0] == 15
    assert remaining[-1] == 0


def test_live_then_offline_restarts_countdown():
    state = StatusState()
    _observe(state, False, T0)
    _observe(state, True, T0 + timedelta(minutes=10))
    message = _observe(state, False, T0 + timedelta(minutes=30))

    assert state.offline_since == T0 + timedelta(minutes=30)
    assert "in 15 minutes." in message


def test_successful_write_clears_failure_flag():
    state = StatusState()
    state.mark_failed("ConnectError")

    _observe(state, True, T0)

    assert state.check_failed is False
    assert state.last_error is None


def test_reset_clears_every_field():
    state = StatusState()
    _observe(state, False, T0)
    state.mark_checked(T0)
    state.mark_failed("ReadTimeout")

    state.reset()

    assert state.snapshot() == {
        "last_status": "",
        "last_checked_at": None,
        "offline_since": None,
        "check_failed": False,
        "last_error": None,
    }
