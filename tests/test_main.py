# tests/test_main.py
import threading

import pytest
from fastapi.testclient import TestClient

from rooms_live import main
from rooms_live.coordinator import FetchCoordinator
from rooms_live.scrape import RetrievalError

from helpers import FakeFallback, FakeSession


@pytest.fixture
def coordinator(monkeypatch, fake_session, fake_fallback):
    coord = FetchCoordinator(fake_session, fake_fallback, url="https://example.test/", timeout_ms=100)
    monkeypatch.setattr(main, "coordinator", coord)
    return coord


@pytest.fixture
def client():
    return TestClient(main.app)


def test_cold_start_fetches_inline(client, coordinator, fake_session):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.text == coordinator.current().body
    assert [room["room_id"] for room in resp.json()] == ["WA-1001", "WA-1002"]
    assert [len(room["players"]) for room in resp.json()] == [2, 1]
    assert len(fake_session.fetches) == 1


def test_cached_snapshot_served_then_refreshed(client, coordinator, fake_session):
    first = coordinator.refresh()

    resp = client.get("/")

    assert resp.text == first.body
    # the background refresh ran after the response
    assert len(fake_session.fetches) == 2
    assert coordinator.current() is not first


def test_warming_up_while_first_fetch_runs(client, coordinator, fake_session):
    gate = threading.Event()
    fake_session.gate = gate
    worker = threading.Thread(target=coordinator.refresh)
    worker.start()
    try:
        assert fake_session.started.wait(5)
        resp = client.get("/")
    finally:
        gate.set()
        worker.join(5)

    assert resp.status_code == 503
    assert resp.json() == {"error": "Server is warming up, please try again in 30 seconds."}
    assert len(fake_session.fetches) == 1


def test_failed_cold_start_serves_fallback(client, monkeypatch):
    fallback = FakeFallback("""
        <table class="table11"><tr id="r5"><th>Private room (created today)</th></tr></table>
    """)
    coord = FetchCoordinator(FakeSession(error=RetrievalError("timeout")), fallback)
    monkeypatch.setattr(main, "coordinator", coord)

    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json() == [{
        "room_id": "Unknown",
        "type": "private",
        "created": "today",
        "last_track": "—unknown—",
        "players": [],
    }]


def test_failed_cold_start_without_fallback_is_empty_list(client, monkeypatch):
    coord = FetchCoordinator(FakeSession(error=RetrievalError("timeout")), FakeFallback(None))
    monkeypatch.setattr(main, "coordinator", coord)

    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json() == []


def test_health_before_and_after_fetch(client, coordinator):
    assert client.get("/health").json() == {"ok": True, "fetching": False, "snapshot": None}

    coordinator.refresh()
    body = client.get("/health").json()

    assert body["snapshot"]["rooms"] == 2
    assert body["snapshot"]["source"] == "live"


def test_cors_allows_any_origin(client, coordinator):
    coordinator.refresh()
    resp = client.get("/", headers={"Origin": "https://example.org"})
    assert resp.headers["access-control-allow-origin"] == "*"


class ClosingSession:
    def __init__(self):
        self.closed = 0

    def close(self):
        self.closed += 1


def test_shutdown_closes_browser_session(monkeypatch):
    fake = ClosingSession()
    monkeypatch.setattr(main, "session", fake)

    with TestClient(main.app) as client:
        assert client.get("/health").status_code == 200
        assert fake.closed == 0

    assert fake.closed == 1
