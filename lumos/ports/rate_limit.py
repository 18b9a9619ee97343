from typing import Protocol


class RateLimiterPort(Protocol):
    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """Record an attempt for `key` and return False once `limit` is reached within `window` seconds."""
        ...
