"""Expiring values and a per-operation cache of them."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Any


class Expires:
    """A deadline that can also be overridden by hand."""

    def __init__(self, ttl: float | timedelta):
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()
        self._expires_at = time.monotonic() + ttl
        self._abort = False

    def set_expires(self, expired: bool) -> None:
        """Override the state: False marks it expired, True clears that mark."""
        self._abort = not expired

    def is_expired(self) -> bool:
        return self._abort or time.monotonic() > self._expires_at


class CachedItem(Expires):
    """A cached value with a lifetime."""

    def __init__(self, value: Any, ttl: float | timedelta):
        super().__init__(ttl)
        self.value = value


class CacheMap:
    """Caches of expiring items, one per operation name."""

    def __init__(self):
        self._pools: dict[str, dict[Any, Expires]] = {}
        self._lock = threading.Lock()

    def pool(self, operation: str) -> dict[Any, Expires]:
        """Drop expired entries, then return the cache for ``operation``."""
        self.clear_invalid()
        with self._lock:
            return self._pools.setdefault(operation, {})

    def clear_invalid(self) -> None:
        """Remove every expired entry from all caches."""
        with self._lock:
            pools = list(self._pools.values())
        for cache in pools:
            for key, item in list(cache.items()):
                if item.is_expired():
                    cache.pop(key, None)