"""
Token blacklist

Tokens presented at logout are refused until the blacklist is bounded by the
cleanup task.
"""
import hashlib
import threading
from typing import Set

from supplier_auth.connections.redis_wrapper import RedisJSONWrapper, RedisKeyProcessor


class TokenBlacklist:

    def add(self, token: str):
        raise NotImplementedError

    def contains(self, token: str) -> bool:
        raise NotImplementedError

    def size(self) -> int:
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class MemoryTokenBlacklist(TokenBlacklist):

    def __init__(self):
        self._tokens: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, token: str):
        with self._lock:
            self._tokens.add(token)

    def contains(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def size(self) -> int:
        with self._lock:
            return len(self._tokens)

    def clear(self):
        with self._lock:
            self._tokens.clear()


class RedisTokenBlacklist(TokenBlacklist):
    """Stores SHA-256 digests so raw tokens never reach redis."""

    def __init__(self, redis_wrapper: RedisJSONWrapper):
        self.redis = redis_wrapper
        self.key = RedisKeyProcessor().blacklist_key()

    @staticmethod
    def _digest(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def add(self, token: str):
        self.redis.set_add(self.key, self._digest(token))

    def contains(self, token: str) -> bool:
        return self.redis.set_contains(self.key, self._digest(token))

    def size(self) -> int:
        return self.redis.set_size(self.key)

    def clear(self):
        self.redis.delete(self.key)
