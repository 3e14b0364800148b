from flask import Flask, request

from app.portal.ratelimit import FixedWindowRateLimiter, check_rate_limit, client_ip


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)
    for _ in range(3):
        assert limiter.hit("1.2.3.4:/api/reports", 3, 60).allowed

    blocked = limiter.hit("1.2.3.4:/api/reports", 3, 60)
    assert not blocked.allowed
    assert blocked.retry_after == 60

    clock.now += 45.5
    assert limiter.hit("1.2.3.4:/api/reports", 3, 60).retry_after == 15


def test_window_resets_after_interval():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)
    limiter.hit("k", 1, 60)
    assert not limiter.hit("k", 1, 60).allowed
    clock.now += 61
    assert limiter.hit("k", 1, 60).allowed


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(clock=FakeClock())
    assert limiter.hit("a", 1, 60).allowed
    assert limiter.hit("b", 1, 60).allowed
    assert not limiter.hit("a", 1, 60).allowed


def test_reset_clears_key():
    limiter = FixedWindowRateLimiter(clock=FakeClock())
    limiter.hit("k", 1, 60)
    limiter.reset("k")
    assert limiter.hit("k", 1, 60).allowed


def test_sweep_removes_expired_records():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(sweep_interval=30, clock=clock)
    limiter.hit("old", 5, 10)
    limiter.hit("fresh", 5, 300)
    assert len(limiter) == 2

    assert limiter.sweep(clock.now + 20) == 1
    assert len(limiter) == 1

    # hit() sweeps on its own once the sweep interval has passed
    clock.now += 400
    limiter.hit("new", 5, 10)
    assert len(limiter) == 1


def test_client_ip_prefers_forwarded_header():
    app = Flask(__name__)
    with app.test_request_context("/", headers={"X-Forwarded-For": "41.223.1.9, 10.0.0.1"}):
        assert client_ip(request) == "41.223.1.9"
    with app.test_request_context("/", environ_base={"REMOTE_ADDR": "10.1.1.1"}):
        assert client_ip(request) == "10.1.1.1"


def test_check_rate_limit_can_be_disabled():
    app = Flask(__name__)
    app.config["RATE_LIMIT_ENABLED"] = False
    with app.test_request_context("/api/reports", method="POST"):
        for _ in range(20):
            assert check_rate_limit(1, 60).allowed


def test_check_rate_limit_uses_app_limiter():
    app = Flask(__name__)
    with app.test_request_context("/api/reports", method="POST"):
        assert check_rate_limit(1, 60).allowed
        assert not check_rate_limit(1, 60).allowed
        assert "rate_limiter" in app.extensions
