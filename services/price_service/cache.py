"""
In-process TTL cache with single-flight loading.

Concurrent callers asking for a key that has no fresh entry share one
in-flight load and all receive its result (or its exception). Failed loads
are not stored. The cache lives on one event loop and is not thread-safe.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

import structlog

from shared.observability import upsell_price_cache_total

logger = structlog.get_logger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class PriceCache:

    def __init__(self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, _Entry] = {}
        self._inflight: Dict[Hashable, asyncio.Future] = {}
        self.hits = 0
        self.misses = 0
        self.coalesced = 0

    def peek(self, key: Hashable) -> Optional[Any]:
        """Fresh cached value for key, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            return None
        return entry.value

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at > self._clock():
            self.hits += 1
            upsell_price_cache_total.labels(outcome="hit").inc()
            return entry.value

        inflight = self._inflight.get(key)
        if inflight is None:
            self.misses += 1
            upsell_price_cache_total.labels(outcome="miss").inc()
            inflight = asyncio.ensure_future(self._load(key, loader))
            self._inflight[key] = inflight
        else:
            self.coalesced += 1
            upsell_price_cache_total.labels(outcome="coalesced").inc()

        # A cancelled waiter must not cancel the load others are sharing
        return await asyncio.shield(inflight)

    async def _load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await loader()
            self._entries[key] = _Entry(value, self._clock() + self.ttl_seconds)
            return value
        except Exception as e:
            logger.info("price_cache_load_failed", key=str(key), error=str(e))
            raise
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, key: Optional[Hashable] = None):
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        return {
            "ttlSeconds": self.ttl_seconds,
            "entries": sum(1 for e in self._entries.values() if e.expires_at > now),
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "inflight": len(self._inflight),
        }
