# tests/test_auth_rate_limit.py
"""
Tests for API key auth and rate limiting.

These tests set MOCK_AUTH=false and configure a test API key with a very small
rate limit. They use monkeypatch to control the auth module's settings so they
don't interfere with other tests (which run with MOCK_AUTH=true by default).
"""
import pytest
from fastapi.testclient import TestClient

from interview_prep.app import app, get_proxy_config
from interview_prep import auth as authmod
from interview_prep.auth import InMemoryFixedWindowLimiter
from interview_prep.config import ProxyConfig


@pytest.fixture
def client():
    app.dependency_overrides[get_proxy_config] = lambda: ProxyConfig(api_key="upstream-key")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def setup_auth(monkeypatch):
    monkeypatch.setattr(authmod, "MOCK_AUTH", False)
    monkeypatch.setattr(authmod, "API_KEYS", {"test-key-123"})
    monkeypatch.setattr(authmod, "_rate_limiter", InMemoryFixedWindowLimiter(limit_per_minute=3))
    yield


def test_missing_api_key_rejected(client):
    r = client.get("/api/test")
    assert r.status_code == 401


def test_wrong_api_key_rejected(client):
    r = client.get("/api/test", headers={"x-api-key": "wrong-key"})
    assert r.status_code == 401


def test_valid_key_accepted(client):
    r = client.get("/api/test", headers={"x-api-key": "test-key-123"})
    assert r.status_code == 200
    assert r.json()["keyLoaded"] is True


def test_rate_limit_enforced(client):
    headers = {"x-api-key": "test-key-123"}
    for i in range(3):
        r = client.get("/api/test", headers=headers)
        assert r.status_code == 200, f"Request {i+1} should succeed"

    r4 = client.get("/api/test", headers=headers)
    assert r4.status_code == 429
    assert r4.json() == {"error": "Rate limit exceeded"}
    assert r4.headers["Retry-After"] == "60"


def test_rate_limit_resets_in_new_window(client):
    headers = {"x-api-key": "test-key-123"}
    for _ in range(3):
        client.get("/api/test", headers=headers)
    assert client.get("/api/test", headers=headers).status_code == 429

    # push the stored window into the past so the next request opens a new one
    limiter = authmod._rate_limiter
    with limiter._lock:
        for key in limiter._store:
            old_window, count = limiter._store[key]
            limiter._store[key] = (old_window - 2, count)

    assert client.get("/api/test", headers=headers).status_code == 200


def test_limiter_counts_clients_separately():
    limiter = InMemoryFixedWindowLimiter(limit_per_minute=1)
    assert limiter.allow_request("a") == (True, 0)
    assert limiter.allow_request("a") == (False, 0)
    assert limiter.allow_request("b") == (True, 0)
    limiter.reset()
    assert limiter.allow_request("a")[0] is True


def test_health_not_rate_limited(client):
    for _ in range(5):
        r = client.get("/health")
        assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_limiter_drops_counters_from_past_windows():
    now = [0.0]
    limiter = InMemoryFixedWindowLimiter(limit_per_minute=5, clock=lambda: now[0])
    limiter.allow_request("10.0.0.1")
    limiter.allow_request("10.0.0.2")
    assert len(limiter._store) == 2

    now[0] = 120.0
    limiter.allow_request("10.0.0.3")
    assert set(limiter._store) == {"10.0.0.3"}
