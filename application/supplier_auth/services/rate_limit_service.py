"""
Sliding-window rate limiting for the OTP endpoints.

A limiter admits at most ``max_requests`` per client address within any
``window_seconds`` span, on top of the ``limits`` moving-window strategy.
Rejected attempts are not recorded, so a client that keeps hammering is
admitted again as soon as its oldest admitted request leaves the window.
"""
import threading
from typing import Optional, Set

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage, storage_from_string
from limits.strategies import MovingWindowRateLimiter

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.core.errors import RateLimited
from supplier_auth.logging.utils import get_app_logger

logger = get_app_logger("supplier_auth.rate_limit")

RATE_LIMIT_NAMESPACE = "auth:rl"


def create_rate_limit_storage(configs: AuthConfigs) -> Storage:
    """In-process storage, or redis shared by every process when STATE_BACKEND=redis."""
    if configs.STATE_BACKEND == "redis":
        return storage_from_string(f"{configs.REDIS_URL}/{configs.REDIS_CACHE_DB}")
    return MemoryStorage()


class RateLimiter:
    """
    Named limiter over a ``limits`` storage.

    Args:
        name: limiter name used in keys and logs (``otp_request``, ``otp_verify``)
        max_requests: admitted requests per window
        window_seconds: window length
        storage: backing storage, in-process memory by default
    """

    def __init__(self, name: str, max_requests: int, window_seconds: int,
                 storage: Optional[Storage] = None):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.item = RateLimitItemPerSecond(max_requests, window_seconds, namespace=RATE_LIMIT_NAMESPACE)
        self.strategy = MovingWindowRateLimiter(storage or MemoryStorage())
        # addresses seen by this process, swept by prune()
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def hit(self, key: str):
        """Admit one request for ``key`` or raise RateLimited."""
        if not self.strategy.hit(self.item, self.name, key):
            logger.warning(f"rate_limited | limiter={self.name} key={key}")
            raise RateLimited()
        with self._lock:
            self._seen.add(key)

    def remaining(self, key: str) -> int:
        return self.strategy.get_window_stats(self.item, self.name, key).remaining

    def prune(self) -> int:
        """Drop windows with no request left in them; returns how many were dropped."""
        with self._lock:
            keys = list(self._seen)

        emptied = 0
        for key in keys:
            if self.remaining(key) < self.max_requests:
                continue
            self.strategy.clear(self.item, self.name, key)
            with self._lock:
                self._seen.discard(key)
            emptied += 1
        return emptied

    def reset(self, key: str):
        self.strategy.clear(self.item, self.name, key)
        with self._lock:
            self._seen.discard(key)
