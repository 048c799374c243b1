"""LRU memo of derived report views.

Views are keyed on ``(snapshot version, query state)``. Both parts are
immutable, so an entry never goes stale; it only drops out when the cache
is full or a new snapshot is installed.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any

import structlog

from ltv_report.foundation.records import Snapshot
from ltv_report.query.state import QueryState
from ltv_report.query.view import ReportView, derive_report_view

logger = structlog.get_logger(__name__)

CacheKey = tuple[int, QueryState]


class ViewCache:
    """Bounded LRU cache in front of :func:`derive_report_view`.

    A ``max_size`` of 0 disables caching; every lookup recomputes. Each
    lookup returns its own copy of the rows, so a caller editing a view
    never changes what later lookups see.
    """

    def __init__(self, max_size: int = 32):
        if max_size < 0:
            raise ValueError(f"max_size cannot be negative: {max_size}")
        self._cache: OrderedDict[CacheKey, ReportView] = OrderedDict()
        self._lock = threading.Lock()
        self.max_size = max_size

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get_view(self, snapshot: Snapshot, state: QueryState) -> ReportView:
        """Return a copy of the cached view for this key, deriving it on a miss."""
        key: CacheKey = (snapshot.version, state)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self._hits += 1
                return cached.detached()
            self._misses += 1

        view = derive_report_view(snapshot, state)
        if self.max_size == 0:
            return view

        with self._lock:
            self._cache[key] = view
            self._cache.move_to_end(key)
            if len(self._cache) > self.max_size:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
                self._evictions += 1
                logger.debug("view_cache_eviction", total_evictions=self._evictions)
        return view.detached()

    def clear(self) -> None:
        with self._lock:
            entries_cleared = len(self._cache)
            self._cache.clear()
        logger.debug("view_cache_cleared", entries_cleared=entries_cleared)

    def get_stats(self) -> dict[str, Any]:
        """Hits, misses, hit rate, size and evictions."""
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total_requests if total_requests > 0 else 0.0,
                "size": len(self._cache),
                "max_size": self.max_size,
                "evictions": self._evictions,
            }
