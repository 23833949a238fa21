from typing import Protocol


class RateLimiter(Protocol):
    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Count one hit against `key`; False once `max_requests` hits fall in the window."""
        ...

    def release(self, key: str, window_seconds: int) -> None:
        """Give back the most recent hit counted against `key`."""
        ...
