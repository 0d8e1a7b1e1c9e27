"""
AnalysisCache: fingerprint-keyed memoization of analysis results.

Results are cached under a cheap shape fingerprint of the input series
(first/last timestamp, bar count, pivot threshold) plus a fingerprint of the
analyzer settings, not a content hash of the bars.
Two different series with the same shape collide; that is accepted.

Entries expire after a fixed staleness window and the cache is bounded:
when full, the oldest-inserted entry is evicted (FIFO, not LRU).
The cache itself is not synchronized; callers sharing it across threads
must guard it (ElliottWaveAnalyzer does).
"""
from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence, Tuple

from ..shared.defaults import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS
from ..shared.types import Bar
from ..indicators.elliott_types import AnalysisResult
from ..signals.config import AnalysisConfig

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Shape fingerprint of an analyzed bar series."""
    first_timestamp: int
    last_timestamp: int
    bar_count: int
    threshold: float
    config: str = ""


# Settings that do not change an analysis result
_CONFIG_FINGERPRINT_EXCLUDED = ("name", "description", "cache_max_entries", "cache_ttl_seconds")


def compute_config_fingerprint(config: AnalysisConfig) -> str:
    """
    Compute fingerprint for the result-affecting settings of a config.

    Args:
        config: Analyzer configuration

    Returns:
        SHA256 hex string (first 16 chars)
    """
    settings = {
        k: v for k, v in config.to_dict().items() if k not in _CONFIG_FINGERPRINT_EXCLUDED
    }
    content = json.dumps(settings, sort_keys=True).encode("utf-8")
    h = hashlib.sha256(content).hexdigest()
    return h[:16]


def compute_fingerprint(
    bars: Sequence[Bar],
    threshold: float,
    config_fingerprint: str = "",
) -> Optional[CacheKey]:
    """
    Compute the cache key for a bar series.

    Args:
        bars: Input bars, oldest first
        threshold: Pivot threshold the analysis runs with
        config_fingerprint: compute_config_fingerprint() of the analyzer's config

    Returns:
        CacheKey, or None for an empty series (nothing to fingerprint)
    """
    if not bars:
        return None
    return CacheKey(
        first_timestamp=bars[0].timestamp,
        last_timestamp=bars[-1].timestamp,
        bar_count=len(bars),
        threshold=float(threshold),
        config=config_fingerprint,
    )


class AnalysisCache:
    """
    In-memory cache for analysis results.

    Bounded in size with FIFO eviction; entries older than ttl_seconds are
    treated as absent.
    """

    def __init__(
        self,
        max_entries: int = CACHE_MAX_ENTRIES,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize analysis cache.

        Args:
            max_entries: Maximum number of cached results
            ttl_seconds: Staleness window in seconds
            clock: Time source returning seconds (injectable for tests)
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[float, AnalysisResult]]" = OrderedDict()

        # Track stats
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def get(self, key: CacheKey) -> Optional[AnalysisResult]:
        """
        Retrieve a cached result.

        Args:
            key: Cache key from compute_fingerprint

        Returns:
            Cached result, or None if absent or stale
        """
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        inserted_at, result = entry
        if self._clock() - inserted_at > self.ttl_seconds:
            del self._entries[key]
            self.expirations += 1
            self.misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return None

        self.hits += 1
        return result

    def put(self, key: CacheKey, result: AnalysisResult) -> None:
        """
        Store a result, evicting the oldest entry when over capacity.

        Re-storing an existing key refreshes its insertion time and moves it
        to the newest position.

        Args:
            key: Cache key from compute_fingerprint
            result: Analysis result to store
        """
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = (self._clock(), result)

        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"Cache full, evicted oldest entry: {evicted_key}")

    def delete(self, key: CacheKey) -> bool:
        """
        Delete a specific cached result.

        Returns:
            True if the entry existed
        """
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cached results and reset stats."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0.0

        return {
            "cache_hits": self.hits,
            "cache_misses": self.misses,
            "cache_size": len(self._entries),
            "evictions": self.evictions,
            "expirations": self.expirations,
            "hit_rate_pct": hit_rate,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (
            f"AnalysisCache(size={stats['cache_size']}/{self.max_entries}, "
            f"hits={stats['cache_hits']}, misses={stats['cache_misses']}, "
            f"hit_rate={stats['hit_rate_pct']:.1f}%)"
        )
