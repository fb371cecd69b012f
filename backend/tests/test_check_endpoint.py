from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from cagewatch.config import Settings
from cagewatch.gate import StatusGate
from cagewatch.main import app
from cagewatch.ratelimit import RateLimiter
from cagewatch.services import LiveChecker
import cagewatch.main as main_module


def _settings() -> Settings:
    return Settings(
        streaming_url="https://twitch.tv/leon",
        streamer_name="Leon",
        gift_card_code="GIFT-1234",
        schedule_enabled=False,
    )


class FakeChecker(LiveChecker):
    name = "fake"

    def __init__(self, live: bool):
        super().__init__(_settings())
        self.live = live
        self.calls = 0

    async def is_live(self) -> bool:
        self.calls += 1
        return self.live


def _install(monkeypatch, live: bool = True, max_requests: int = 3) -> StatusGate:
    gate = StatusGate(_settings(), FakeChecker(live))
    monkeypatch.setattr(main_module, "gate", gate)
    monkeypatch.setattr(main_module, "limiter", RateLimiter(max_requests, 10))
    return gate


def test_check_returns_plain_text_status(monkeypatch):
    _install(monkeypatch, live=True)

    client = TestClient(app)
    response = client.get("/check")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.startswith("User is live at <a href='https://twitch.tv/leon'>")
    assert response.text.endswith("seconds ago)")


def test_check_serves_cache_between_polls(monkeypatch):
    gate = _install(monkeypatch, live=False)

    client = TestClient(app)
    first = client.get("/check")
    second = client.get("/check")

    assert first.status_code == 200
    assert second.status_code == 200
    assert gate.checker.calls == 1
    assert "fail to go live in 15 minutes." in second.text


def test_check_is_rate_limited_per_client(monkeypatch):
    _install(monkeypatch, max_requests=3)

    client = TestClient(app)
    statuses = [client.get("/check").status_code for _ in range(4)]

    assert statuses == [200, 200, 200, 429]
    limited = client.get("/check")
    assert int(limited.headers["retry-after"]) >= 1


def test_status_view_never_exposes_gift_card_code(monkeypatch):
    gate = _install(monkeypatch, live=False)
    now = datetime.now(timezone.utc)
    gate.state.mark_checked(now)
    gate.state.offline_since = now - timedelta(minutes=20)
    gate.state.write("Leon has not been live for 15 minutes. Gift card code: GIFT-1234")

    client = TestClient(app)
    response = client.get("/api/status")

    assert response.status_code == 200
    payload = response.json()
    assert payload["live"] is False
    assert payload["minutes_remaining"] == 0
    assert "GIFT-1234" not in response.text


def test_healthz_is_not_rate_limited(monkeypatch):
    _install(monkeypatch, max_requests=1)

    client = TestClient(app)
    statuses = [client.get("/healthz").status_code for _ in range(5)]

    assert statuses == [200] * 5
    assert client.get("/healthz").json() == {"status": "ok"}


def test_cors_allows_any_origin_by_default(monkeypatch):
    _install(monkeypatch)

    client = TestClient(app)
    response = client.get("/healthz", headers={"Origin": "https://example.com"})

    assert response.headers.get("access-control-allow-origin") == "*"
