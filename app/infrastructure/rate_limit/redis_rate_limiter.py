import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    """Fixed-window limiter shared by every worker that points at the same Redis."""

    def __init__(self, url: str, prefix: str = "premiumchat:rl:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        if window_seconds <= 0:
            return True
        rk = f"{self.prefix}{key}:{window_seconds}"
        # INCR then EXPIRE NX so the window starts at the first hit
        pipe = self.client.pipeline()
        pipe.incr(rk, 1)
        pipe.expire(rk, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)

    def release(self, key: str, window_seconds: int) -> None:
        if window_seconds <= 0:
            return
        rk = f"{self.prefix}{key}:{window_seconds}"
        if int(self.client.decr(rk)) < 0:
            self.client.delete(rk)
