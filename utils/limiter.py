import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request
from slowapi import Limiter

from utils.client_identity import client_ip
from utils.settings import Settings, get_settings

# Redis support for distributed rate limiting
try:
    import redis
    _REDIS_AVAILABLE = True
except ImportError:
    redis = None  # type: ignore
    _REDIS_AVAILABLE = False

logger = logging.getLogger("forms.limiter")


def forwarded_for_ip(request: Request) -> str:
    """slowapi key function: same proxy-header resolution as the submit endpoint."""
    return client_ip(request)


class RateLimiter(ABC):
    """Fixed-window admission control keyed by client identifier."""

    limit: int
    window_seconds: int

    @abstractmethod
    def allow(self, key: str) -> bool:
        """Record one call for key; False when the current window is exhausted."""


@dataclass
class _Window:
    count: int
    reset_time: float


class InMemoryRateLimiter(RateLimiter):
    """Process-local fixed window counter.

    Not shared between workers or instances; use RedisRateLimiter when more
    than one process serves traffic.
    """

    def __init__(self, limit: int = 10, window_seconds: int = 15 * 60, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            current = self._windows.get(key)
            if current is None or now > current.reset_time:
                self._windows[key] = _Window(count=1, reset_time=now + self.window_seconds)
                return True
            if current.count >= self.limit:
                return False
            current.count += 1
            return True

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


# Same fixed-window rules as InMemoryRateLimiter, executed atomically in Redis.
# The key TTL plays the role of reset_time.
_FIXED_WINDOW_LUA = """
local current = redis.call('GET', KEYS[1])
if not current then
    redis.call('SET', KEYS[1], 1, 'PX', ARGV[2])
    return 1
end
if tonumber(current) >= tonumber(ARGV[1]) then
    return 0
end
redis.call('INCR', KEYS[1])
return 1
"""


class RedisRateLimiter(RateLimiter):
    """Fixed window counter shared by every instance pointed at the same Redis."""

    def __init__(self, client, limit: int = 10, window_seconds: int = 15 * 60, prefix: str = "rate_limit"):
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix
        self._client = client
        self._script = client.register_script(_FIXED_WINDOW_LUA)

    def allow(self, key: str) -> bool:
        result = self._script(
            keys=[f"{self.prefix}:{key}"],
            args=[self.limit, self.window_seconds * 1000],
        )
        return int(result) == 1


def _get_redis_client(redis_url: Optional[str]):
    """Get a connected Redis client, or None when not configured/reachable."""
    if not redis_url or not _REDIS_AVAILABLE:
        return None
    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
        return client
    except Exception as e:
        logger.warning("Failed to connect to Redis, falling back to in-memory limits: %s", e)
        return None


def create_submission_limiter(settings: Optional[Settings] = None) -> RateLimiter:
    """Limiter for the public submission endpoint: Redis when configured, else in-memory."""
    settings = settings or get_settings()
    client = _get_redis_client(settings.REDIS_URL)
    if client is not None:
        logger.info("Using Redis for submission rate limiting")
        return RedisRateLimiter(
            client,
            limit=settings.SUBMIT_RATE_LIMIT,
            window_seconds=settings.SUBMIT_RATE_WINDOW_SECONDS,
        )
    logger.info("Using in-memory submission rate limiting (Redis not configured)")
    return InMemoryRateLimiter(
        limit=settings.SUBMIT_RATE_LIMIT,
        window_seconds=settings.SUBMIT_RATE_WINDOW_SECONDS,
    )


def _create_limiter() -> Limiter:
    """slowapi limiter for dashboard routes, with Redis storage when available."""
    settings = get_settings()
    if settings.REDIS_URL and _REDIS_AVAILABLE:
        return Limiter(key_func=forwarded_for_ip, storage_uri=settings.REDIS_URL)
    return Limiter(key_func=forwarded_for_ip)


# Global slowapi limiter shared across the app and routers
limiter = _create_limiter()
