# =============================================================================
# tests/test_rate_limit.py - Rate Limiting Tests
# =============================================================================
# Tests for RateLimiter and RateLimitMiddleware using a hand-driven clock.
# =============================================================================

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.middleware import RateLimiter
from tests.conftest import FakeClock


class TestRateLimiter:
    """Tests for the sliding-window RateLimiter."""

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(limit=3, window_seconds=60, clock=FakeClock())

        assert [limiter.allow_request("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_window_resets_after_elapsing(self):
        clock = FakeClock()
        limiter = RateLimiter(limit=2, window_seconds=60, clock=clock)
        limiter.allow_request("client")
        limiter.allow_request("client")
        assert limiter.allow_request("client") is False

        clock.advance(59)
        assert limiter.allow_request("client") is False

        clock.advance(2)
        assert limiter.allow_request("client") is True

    def test_window_slides(self):
        """Budget frees up one request at a time as old ones expire."""
        clock = FakeClock()
        limiter = RateLimiter(limit=2, window_seconds=10, clock=clock)
        limiter.allow_request("client")
        clock.advance(5)
        limiter.allow_request("client")

        clock.advance(6)  # first request expired, second still inside
        assert limiter.allow_request("client") is True
        assert limiter.allow_request("client") is False

    def test_clients_are_independent(self):
        limiter = RateLimiter(limit=1, window_seconds=60, clock=FakeClock())

        assert limiter.allow_request("a") is True
        assert limiter.allow_request("b") is True
        assert limiter.allow_request("a") is False

    def test_stale_clients_are_evicted(self):
        """Addresses that never return do not stay in memory."""
        clock = FakeClock()
        limiter = RateLimiter(limit=5, window_seconds=60, clock=clock)
        for n in range(1000):
            limiter.allow_request(f"10.0.{n // 256}.{n % 256}")
        assert len(limiter._history) == 1000

        clock.advance(3600)
        limiter.allow_request("192.168.1.1")

        assert list(limiter._history) == ["192.168.1.1"]

    def test_clients_inside_window_survive_sweep(self):
        clock = FakeClock()
        limiter = RateLimiter(limit=5, window_seconds=60, clock=clock)
        limiter.allow_request("old")
        clock.advance(30)
        limiter.allow_request("recent")

        clock.advance(40)  # sweep due; "old" expired, "recent" still counted
        limiter.allow_request("new")

        assert sorted(limiter._history) == ["new", "recent"]

    def test_denied_requests_are_not_recorded(self):
        clock = FakeClock()
        limiter = RateLimiter(limit=1, window_seconds=10, clock=clock)
        limiter.allow_request("client")
        clock.advance(5)
        limiter.allow_request("client")  # denied

        clock.advance(6)
        assert limiter.allow_request("client") is True

    def test_zero_limit_denies_everything(self):
        limiter = RateLimiter(limit=0, window_seconds=60, clock=FakeClock())
        assert limiter.allow_request("client") is False

    def test_retry_after(self):
        clock = FakeClock()
        limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
        assert limiter.retry_after("client") == 0

        limiter.allow_request("client")
        clock.advance(20.5)

        assert limiter.retry_after("client") == 40


class TestRateLimitMiddleware:
    """Tests for 429 responses from the API."""

    @pytest.fixture
    def limited_client(self, make_settings, clock):
        settings = make_settings(RATE_LIMIT_MAX="3", RATE_LIMIT_WINDOW_SECONDS="60")
        with TestClient(create_app(settings, clock=clock)) as client:
            yield client

    def test_requests_over_budget_get_429(self, limited_client):
        statuses = [limited_client.get("/healthz").status_code for _ in range(4)]

        assert statuses == [200, 200, 200, 429]

    def test_429_body_and_headers(self, limited_client, clock):
        for _ in range(3):
            limited_client.get("/healthz")
        clock.advance(15)

        response = limited_client.get("/healthz")

        assert response.status_code == 429
        assert response.json() == {"error": "Too Many Requests"}
        assert response.headers["retry-after"] == "45"
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_budget_resets_after_window(self, limited_client, clock):
        for _ in range(3):
            limited_client.get("/healthz")
        assert limited_client.get("/healthz").status_code == 429

        clock.advance(61)

        assert limited_client.get("/healthz").status_code == 200

    def test_not_found_counts_against_budget(self, limited_client):
        for _ in range(3):
            assert limited_client.get("/__nope").status_code == 404

        assert limited_client.get("/healthz").status_code == 429

    def test_default_budget_is_300_per_minute(self, api_client):
        statuses = [api_client.get("/readyz").status_code for _ in range(301)]

        assert statuses[:300] == [200] * 300
        assert statuses[300] == 429

    def test_429_echoes_request_id(self, limited_client):
        for _ in range(3):
            limited_client.get("/healthz")

        response = limited_client.get("/healthz", headers={"x-request-id": "throttled-1"})

        assert response.status_code == 429
        assert response.headers["x-request-id"] == "throttled-1"

    def test_429_generates_request_id(self, limited_client):
        for _ in range(3):
            limited_client.get("/healthz")

        request_id = limited_client.get("/healthz").headers["x-request-id"]

        assert len(request_id) == 32
        int(request_id, 16)
