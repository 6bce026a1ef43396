"""In-memory sliding window rate limiting.

Process-local: the bot runs as a single instance for a single user, so
per-identity timestamps kept in a dict are enough.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

DEFAULT_RATE_LIMIT = {
    "max_requests": 30,
    "window_seconds": 60,
}


# Lazy import: if CONFIG is available, use its rate_limit as default
def _get_default_limits() -> Dict[str, int]:
    try:
        from brainbot.config import CONFIG
        return dict(CONFIG["rate_limit"])
    except Exception:
        return dict(DEFAULT_RATE_LIMIT)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_seconds: float


class RateLimiter:
    """Caps requests per key within a sliding window."""

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        defaults = _get_default_limits()
        self.max_requests = max_requests if max_requests is not None else defaults["max_requests"]
        self.window_seconds = window_seconds if window_seconds is not None else defaults["window_seconds"]
        self._clock = clock
        self._calls: Dict[str, List[float]] = {}

    def _prune(self, key: str, now: float) -> List[float]:
        """Drop timestamps that fell out of the window."""
        cutoff = now - self.window_seconds
        timestamps = [ts for ts in self._calls.get(key, []) if ts > cutoff]
        if timestamps:
            self._calls[key] = timestamps
        else:
            self._calls.pop(key, None)
        return timestamps

    def check(self, key: str) -> RateLimitResult:
        """Record a request for ``key`` if the window still has room."""
        now = self._clock()
        timestamps = self._prune(key, now)

        if len(timestamps) >= self.max_requests:
            # A zero limit never records anything, so there may be no oldest call
            reset = timestamps[0] + self.window_seconds - now if timestamps else self.window_seconds
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_seconds=float(reset),
            )

        timestamps.append(now)
        self._calls[key] = timestamps
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - len(timestamps),
            reset_seconds=float(self.window_seconds),
        )

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one key, or every key."""
        if key is None:
            self._calls.clear()
        else:
            self._calls.pop(key, None)
