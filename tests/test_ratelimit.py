"""Tests for ratelimit.py."""

import pytest

from octomatiz.ratelimit import RateLimitDecision, RateLimiter, client_ip


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_allows_up_to_limit(self, limiter):
        decisions = [limiter.check("deploy:1.2.3.4", 3, 60_000) for _ in range(3)]

        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == [2, 1, 0]

    def test_denies_over_limit(self, limiter, clock):
        for _ in range(3):
            limiter.check("deploy:1.2.3.4", 3, 60_000)
        clock.now += 15_000

        decision = limiter.check("deploy:1.2.3.4", 3, 60_000)

        assert decision.allowed is False
        assert decision.remaining == 0
        assert decision.reset_in_ms == 45_000
        assert decision.retry_after_seconds == 45

    def test_window_resets(self, limiter, clock):
        for _ in range(4):
            limiter.check("deploy:1.2.3.4", 3, 60_000)
        clock.now += 60_000

        decision = limiter.check("deploy:1.2.3.4", 3, 60_000)

        assert decision.allowed is True
        assert decision.remaining == 2

    def test_keys_are_independent(self, limiter):
        limiter.check("deploy:1.2.3.4", 1, 60_000)

        assert limiter.check("deploy:1.2.3.4", 1, 60_000).allowed is False
        assert limiter.check("deploy:5.6.7.8", 1, 60_000).allowed is True

    def test_prunes_expired_windows(self, clock, monkeypatch):
        monkeypatch.setattr("octomatiz.ratelimit.MAX_TRACKED_KEYS", 2)
        limiter = RateLimiter(clock=clock)
        for i in range(3):
            limiter.check(f"k{i}", 1, 1_000)
        clock.now += 1_000

        limiter.check("fresh", 1, 1_000)

        assert set(limiter._windows) == {"fresh"}


class TestRateLimitDecision:
    """Tests for RateLimitDecision.retry_after_seconds."""

    @pytest.mark.parametrize(
        ("reset_in_ms", "expected"),
        [(60_000, 60), (1_500, 2), (1, 1), (0, 1)],
    )
    def test_rounds_up(self, reset_in_ms, expected):
        decision = RateLimitDecision(allowed=False, remaining=0, reset_in_ms=reset_in_ms)
        assert decision.retry_after_seconds == expected


class TestClientIp:
    """Tests for client_ip header precedence."""

    def test_cloudflare_header_first(self):
        headers = {
            "cf-connecting-ip": "1.1.1.1",
            "x-forwarded-for": "2.2.2.2",
            "x-real-ip": "3.3.3.3",
        }
        assert client_ip(headers, "9.9.9.9") == "1.1.1.1"

    def test_first_forwarded_hop(self):
        headers = {"x-forwarded-for": " 2.2.2.2 , 10.0.0.1", "x-real-ip": "3.3.3.3"}
        assert client_ip(headers) == "2.2.2.2"

    def test_real_ip(self):
        assert client_ip({"x-real-ip": "3.3.3.3"}, "9.9.9.9") == "3.3.3.3"

    def test_fallback(self):
        assert client_ip({}, "9.9.9.9") == "9.9.9.9"

    def test_unknown(self):
        assert client_ip({}) == "unknown"
