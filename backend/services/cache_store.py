"""
Cache Store - Key/value snapshots with TTL.

Two interchangeable backends, chosen once at process start:
- RedisCacheStore: remote Redis (redis-py), used when credentials are configured
- MemoryCacheStore: in-process dict with lazy expiry, used otherwise

Values are JSON-encoded the same way in both backends, so callers always get
plain dicts/lists back.
"""
import json
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import redis

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_TTL = 12 * 60 * 60
INCR_TTL = 7 * 24 * 60 * 60

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class CacheBackendError(Exception):
    """The remote cache failed at runtime."""
    pass


def encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def decode(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        # Plain values written by other clients (e.g. INCR counters)
        return raw


class CacheStore(ABC):
    """Backend-independent cache interface."""

    mode: str = "base"

    @abstractmethod
    def get(self, key: str) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def keys_with_prefix(self, prefix: str) -> List[str]:
        pass

    @abstractmethod
    def incr(self, key: str) -> int:
        """Atomic increment; a new key starts at 1 with a 7-day TTL."""
        pass

    @abstractmethod
    def key_count(self) -> int:
        pass

    def clear_prefix(self, prefix: str) -> int:
        """Delete every key under a prefix (best effort, not atomic)."""
        keys = self.keys_with_prefix(prefix)
        for key in keys:
            self.delete(key)
        return len(keys)

    def status(self) -> Dict[str, Any]:
        return {"mode": self.mode, "keyCount": self.key_count()}


@dataclass
class CacheRecord:
    value: str
    expires_at: Optional[float]


class MemoryCacheStore(CacheStore):
    """In-process store; expiry is checked lazily on read."""

    mode = "memory"

    def __init__(self, default_ttl: int = DEFAULT_MEMORY_TTL, clock: Callable[[], float] = time.time):
        self.default_ttl = default_ttl
        self._clock = clock
        self._records: Dict[str, CacheRecord] = {}

    def _live_record(self, key: str) -> Optional[CacheRecord]:
        record = self._records.get(key)
        if record is None:
            return None
        if record.expires_at is not None and self._clock() >= record.expires_at:
            del self._records[key]
            return None
        return record

    def get(self, key: str) -> Any:
        record = self._live_record(key)
        return decode(record.value) if record else None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = ttl or self.default_ttl
        self._records[key] = CacheRecord(value=encode(value), expires_at=self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def keys_with_prefix(self, prefix: str) -> List[str]:
        return [key for key in list(self._records) if key.startswith(prefix) and self._live_record(key)]

    def incr(self, key: str) -> int:
        record = self._live_record(key)
        if record is None:
            self._records[key] = CacheRecord(value=encode(1), expires_at=self._clock() + INCR_TTL)
            return 1
        count = int(decode(record.value) or 0) + 1
        record.value = encode(count)
        return count

    def key_count(self) -> int:
        return len([key for key in list(self._records) if self._live_record(key)])


class RedisCacheStore(CacheStore):
    """Remote Redis store. Runtime errors surface as CacheBackendError."""

    mode = "redis"

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str, password: Optional[str] = None) -> "RedisCacheStore":
        kwargs = {"socket_timeout": 5, "socket_connect_timeout": 5}
        if password:
            kwargs["password"] = password
        return cls(redis.from_url(url, **kwargs))

    def ping(self) -> bool:
        return bool(self.client.ping())

    def get(self, key: str) -> Any:
        try:
            return decode(self.client.get(key))
        except redis.RedisError as e:
            raise CacheBackendError(f"GET {key} failed: {e}") from e

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            if ttl:
                self.client.set(key, encode(value), ex=int(ttl))
            else:
                self.client.set(key, encode(value))
        except redis.RedisError as e:
            raise CacheBackendError(f"SET {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise CacheBackendError(f"DEL {key} failed: {e}") from e

    def keys_with_prefix(self, prefix: str) -> List[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        try:
            return [
                key.decode("utf-8") if isinstance(key, bytes) else key
                for key in self.client.scan_iter(match=pattern, count=200)
            ]
        except redis.RedisError as e:
            raise CacheBackendError(f"SCAN {prefix}* failed: {e}") from e

    def incr(self, key: str) -> int:
        try:
            count = int(self.client.incr(key))
            if count == 1:
                self.client.expire(key, INCR_TTL)
            return count
        except redis.RedisError as e:
            raise CacheBackendError(f"INCR {key} failed: {e}") from e

    def key_count(self) -> int:
        try:
            return int(self.client.dbsize())
        except redis.RedisError as e:
            raise CacheBackendError(f"DBSIZE failed: {e}") from e


def create_cache_store(url: Optional[str] = None, password: Optional[str] = None) -> CacheStore:
    """
    Select the backend once, at start-up.

    A configured but unreachable Redis falls back to memory with a warning.
    """
    if not url:
        logger.warning("No remote cache configured; using in-memory cache (data is per-process)")
        return MemoryCacheStore()

    try:
        store = RedisCacheStore.from_url(url, password=password)
        store.ping()
        logger.info("Cache store using Redis")
        return store
    except (redis.RedisError, ValueError) as e:
        logger.warning(f"Failed to connect to Redis: {e}; falling back to in-memory cache")
        return MemoryCacheStore()
