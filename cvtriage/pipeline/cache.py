"""Injected TTL cache for dashboard filter results.

Owned by the caller and passed into the pipeline, so tests control the clock
and eviction. Entries expire after ttl_seconds; the oldest entry is evicted
once max_entries is reached.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

from cvtriage.core.config import CacheConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Small TTL + LRU cache.

    Usage::

        cache = ResultCache(CacheConfig(ttl_seconds=60), clock=fake_clock)
        result = cache.get_or_compute(key, lambda: expensive())
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or CacheConfig()
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, T]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self._config.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def put(self, key: Hashable, value: T) -> None:
        self._entries[key] = (self._clock(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self._config.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("ResultCache: evicted %r", evicted)

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        value = compute()
        self.put(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()
