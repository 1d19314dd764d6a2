# interview_prep/auth.py
"""
Optional API key check and per-client rate limiting for /api/* routes.

The completion proxy spends a server-held AI key, so deployments that are
reachable from the internet can require an API key and cap request rates.

Env vars:
- MOCK_AUTH (default: true) — bypass both checks in dev
- API_KEYS — comma-separated allowed keys
- RATE_LIMIT_PER_MINUTE (default: 30)
"""

import os
import time
import threading
from typing import Optional, Tuple, Dict, Set

MOCK_AUTH = os.getenv("MOCK_AUTH", "true").lower() in ("1", "true", "yes")
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "30"))


def _load_api_keys(raw: str) -> Set[str]:
    return {k.strip() for k in raw.split(",") if k.strip()}


API_KEYS = _load_api_keys(os.getenv("API_KEYS", ""))


class InMemoryFixedWindowLimiter:
    """Thread-safe fixed-window counter, one window per minute per client."""

    def __init__(self, limit_per_minute: int = 30, clock=time.time):
        self.limit = limit_per_minute
        self._clock = clock
        self._window: Optional[int] = None
        self._store: Dict[str, Tuple[int, int]] = {}  # client -> (window_minute, count)
        self._lock = threading.Lock()

    def allow_request(self, client_id: str) -> Tuple[bool, int]:
        window = int(self._clock()) // 60
        with self._lock:
            if window != self._window:
                # drop counters from past windows
                self._store = {k: v for k, v in self._store.items() if v[0] == window}
                self._window = window
            wstart, count = self._store.get(client_id, (window, 0))
            if wstart != window:
                count = 0
            if count >= self.limit:
                return False, 0
            self._store[client_id] = (window, count + 1)
            return True, self.limit - (count + 1)

    def reset(self):
        with self._lock:
            self._store.clear()


_rate_limiter = InMemoryFixedWindowLimiter(RATE_LIMIT_PER_MINUTE)


def is_key_allowed(api_key: Optional[str]) -> bool:
    if MOCK_AUTH:
        return True
    return bool(api_key) and api_key in API_KEYS


def check_rate_limit(client_id: str) -> Tuple[bool, Optional[int]]:
    """Check and consume quota. Returns (allowed, remaining)."""
    if MOCK_AUTH:
        return True, None
    return _rate_limiter.allow_request(client_id or "anonymous")
