from datetime import datetime, timedelta
from threading import Lock

from lumos.adapters.clock import SystemClock
from lumos.ports.clock import ClockPort
from lumos.rules.models import RateLimitRules


class RateLimiter:
    """In-process sliding-window limiter. Implements RateLimiterPort."""

    def __init__(
        self,
        rules: RateLimitRules,
        clock: ClockPort | None = None,
    ):
        self.rules = rules
        self._clock = clock if clock is not None else SystemClock()
        self._history: dict[str, list[datetime]] = {}
        self._lock = Lock()

    def _cleanup(self, key: str, window: int) -> None:
        cutoff = self._clock.now() - timedelta(seconds=window)
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """
        Check if request is allowed.
        If allowed, records the attempt and returns True.
        If denied, returns False.
        """
        if limit <= 0:
            return False

        with self._lock:
            self._cleanup(key, window)
            current_count = len(self._history.get(key, []))

            if current_count >= limit:
                return False

            self._history.setdefault(key, []).append(self._clock.now())
            return True

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
