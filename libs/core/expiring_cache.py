from __future__ import annotations

import asyncio
import hashlib
import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from libs.core import logging as core_logging

LOGGER = core_logging.get_logger("cache")

_BYTES_PREFIX = b"b:"
_JSON_PREFIX = b"j:"


def cache_key(operation: str, role: str, content: str) -> str:
    digest = hashlib.sha256((content or "").encode("utf-8")).hexdigest()[:16]
    normalized_role = " ".join((role or "").lower().split())
    return f"{operation}:{normalized_role}:{digest}"


class ExpiringCache:
    def get(self, key: str) -> Any:  # pragma: no cover - interface
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def sweep(self) -> int:
        return 0

    def __len__(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class InMemoryExpiringCache(ExpiringCache):
    def __init__(self, ttl_s: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_s = float(ttl_s)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at > self.ttl_s:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, (stored_at, _value) in self._entries.items()
                if now - stored_at > self.ttl_s
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisExpiringCache(ExpiringCache):
    def __init__(self, client: Any, ttl_s: float, namespace: str = "enhancer") -> None:
        self.client = client
        self.ttl_s = int(ttl_s)
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str, ttl_s: float) -> "RedisExpiringCache":
        import redis

        return cls(redis.Redis.from_url(url), ttl_s)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Any:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        if raw.startswith(_BYTES_PREFIX):
            return raw[len(_BYTES_PREFIX) :]
        if raw.startswith(_JSON_PREFIX):
            return json.loads(raw[len(_JSON_PREFIX) :].decode("utf-8"))
        return None

    def set(self, key: str, value: Any) -> None:
        if isinstance(value, (bytes, bytearray)):
            payload = _BYTES_PREFIX + bytes(value)
        else:
            payload = _JSON_PREFIX + json.dumps(value).encode("utf-8")
        self.client.set(self._key(key), payload, ex=max(1, self.ttl_s))

    def __len__(self) -> int:
        return sum(1 for _ in self.client.scan_iter(match=f"{self.namespace}:*"))


async def run_sweeper(cache: ExpiringCache, interval_s: float) -> None:
    while True:
        await asyncio.sleep(interval_s)
        removed = cache.sweep()
        if removed:
            LOGGER.info("cache_swept", removed=int(removed), remaining=int(len(cache)))


def create_cache(
    backend: str,
    *,
    ttl_s: float,
    redis_url: Optional[str] = None,
) -> ExpiringCache:
    name = (backend or "memory").strip().lower()
    if name == "redis":
        return RedisExpiringCache.from_url(redis_url or "redis://localhost:6379/0", ttl_s)
    return InMemoryExpiringCache(ttl_s)
