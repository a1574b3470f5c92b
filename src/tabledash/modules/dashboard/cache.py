"""
Tabledash Dashboard - Query Result Cache.

In-memory cache of browse pages keyed by
(table, category, page, search, config fingerprint).

- Entries expire after a TTL. Every insert sweeps expired and outdated
  entries, and the oldest entries go first once the size bound is reached.
- Each table has a version, bumped by every mutation; entries of an older
  version are never served.
- At most one fetch per key is in flight. Concurrent callers for the same
  key await the same future instead of querying again.
- A fetch that finishes after its table was invalidated is handed to its
  waiters but not stored.
"""

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tabledash.config import get_settings

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str | None, int, str, str]


@dataclass
class _Entry:
    value: Any
    stored_at: float
    version: int


class QueryResultCache:
    """TTL + version cache with single-flight loading."""

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._inflight: dict[CacheKey, asyncio.Future] = {}
        self._versions: dict[str, int] = defaultdict(int)
        self.hits = 0
        self.misses = 0
        self.coalesced = 0
        self.evictions = 0

    @staticmethod
    def make_key(
        table: str,
        category: str | None,
        page: int,
        search: str | None,
        fingerprint: str,
    ) -> CacheKey:
        return (table, category or None, page, (search or "").strip(), fingerprint)

    def _fresh(self, entry: _Entry, table: str) -> bool:
        if entry.version != self._versions[table]:
            return False
        return (self._clock() - entry.stored_at) < self.ttl_seconds

    async def get_or_load(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or load it exactly once."""
        table = key[0]

        entry = self._entries.get(key)
        if entry is not None:
            if self._fresh(entry, table):
                self.hits += 1
                return entry.value
            del self._entries[key]

        inflight = self._inflight.get(key)
        if inflight is not None:
            self.coalesced += 1
            return await asyncio.shield(inflight)

        self.misses += 1
        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        version = self._versions[table]
        try:
            value = await loader()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so a fetch without waiters does not warn.
            future.exception()
            raise
        finally:
            self._inflight.pop(key, None)

        future.set_result(value)
        if self._versions[table] == version:
            self._store(key, _Entry(value=value, stored_at=self._clock(), version=version))
        else:
            logger.debug(f"Discarding result for {key}: table invalidated during fetch")
        return value

    def _store(self, key: CacheKey, entry: _Entry) -> None:
        """Insert after dropping expired or outdated entries, then the oldest ones over the bound."""
        self._entries.pop(key, None)
        for stale in [k for k, e in self._entries.items() if not self._fresh(e, k[0])]:
            del self._entries[stale]
            self.evictions += 1
        while self._entries and len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]
            self.evictions += 1
        self._entries[key] = entry

    def invalidate(self, table: str) -> None:
        """Drop every cached page of ``table``."""
        self._versions[table] += 1
        stale = [key for key in self._entries if key[0] == table]
        for key in stale:
            del self._entries[key]
        logger.info(f"Invalidated {len(stale)} cached page(s) for table: {table}")

    def clear(self) -> None:
        for table in list(self._versions):
            self._versions[table] += 1
        self._entries.clear()
        logger.info("Cleared query result cache")

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._entries),
            "inflight": len(self._inflight),
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "evictions": self.evictions,
        }


_cache: QueryResultCache | None = None


def get_query_cache() -> QueryResultCache:
    """Process-wide cache instance."""
    global _cache
    if _cache is None:
        dashboard = get_settings().dashboard
        _cache = QueryResultCache(
            ttl_seconds=dashboard.cache_ttl_seconds,
            max_entries=dashboard.cache_max_entries,
        )
    return _cache
