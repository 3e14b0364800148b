from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import Request, current_app, jsonify, request

TOO_MANY_REQUESTS = "Too many requests. Please try again later."


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after: int = 0


class FixedWindowRateLimiter:
    """
    In-memory fixed-window counter keyed by an arbitrary string (usually ip:path).
    Process-local: each worker keeps its own counts.
    """

    def __init__(self, sweep_interval: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._records: dict[str, list[float]] = {}  # key -> [count, reset_at]
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        return len(self._records)

    def hit(self, key: str, max_requests: int, interval: float) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep_locked(now)
                self._next_sweep = now + self._sweep_interval

            record = self._records.get(key)
            if record is None or now > record[1]:
                self._records[key] = [1, now + interval]
                return RateLimitResult(allowed=True)

            if record[0] >= max_requests:
                return RateLimitResult(allowed=False, retry_after=max(1, math.ceil(record[1] - now)))

            record[0] += 1
            return RateLimitResult(allowed=True)

    def reset(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def sweep(self, now: float | None = None) -> int:
        with self._lock:
            return self._sweep_locked(self._clock() if now is None else now)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, (_count, reset_at) in self._records.items() if now > reset_at]
        for k in expired:
            del self._records[k]
        return len(expired)


def client_ip(req: Request) -> str:
    forwarded = req.headers.get("X-Forwarded-For") or ""
    first = forwarded.split(",")[0].strip()
    return first or req.remote_addr or "unknown"


def get_limiter() -> FixedWindowRateLimiter:
    limiter = current_app.extensions.get("rate_limiter")
    if limiter is None:
        limiter = FixedWindowRateLimiter()
        current_app.extensions["rate_limiter"] = limiter
    return limiter


def check_rate_limit(max_requests: int = 10, interval: float = 60.0, *, key: str | None = None) -> RateLimitResult:
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return RateLimitResult(allowed=True)
    key = key or f"{client_ip(request)}:{request.path}"
    return get_limiter().hit(key, max_requests, interval)


def rate_limit(max_requests: int = 10, interval: float = 60.0) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            result = check_rate_limit(max_requests, interval)
            if not result.allowed:
                current_app.logger.warning("Rate limit exceeded: ip=%s path=%s", client_ip(request), request.path)
                resp = jsonify({"success": False, "error": TOO_MANY_REQUESTS})
                resp.status_code = 429
                resp.headers["Retry-After"] = str(result.retry_after)
                return resp
            return fn(*args, **kwargs)

        return wrapped

    return decorator
