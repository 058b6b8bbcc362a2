"""
Analysis result cache.

Memoizes one AnalysisResult per (change, branch) key until a caller
explicitly invalidates it. There is no TTL and no eviction: entries live
until clear() or clear_change() removes them.
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, MutableMapping, NamedTuple, Optional, Tuple

from pullwise.schemas import AnalysisResult

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Composite cache key: change identifier plus branch name."""
    change_key: str
    branch: str

    def __str__(self) -> str:
        return f"{self.change_key}@{self.branch}"


class AnalysisCache:
    """
    In-process cache of analysis results.

    Storage is injectable so callers can share or inspect the mapping.
    get_or_compute() holds a per-key lock, so concurrent callers of one key
    compute at most once while different keys never wait on each other.

    Every clear bumps a generation. A computation that was already running
    when its key was cleared still returns its result to its caller but does
    not store it, since the input it saw is stale.
    """

    def __init__(self, storage: Optional[MutableMapping[CacheKey, AnalysisResult]] = None):
        """
        Initialize cache.

        Args:
            storage: Backing mapping (a new dict if None)
        """
        self._storage = {} if storage is None else storage
        self._registry_lock = threading.Lock()
        self._key_locks: Dict[CacheKey, threading.Lock] = {}
        self._epoch = 0
        self._change_generations: Dict[str, int] = defaultdict(int)
        self._key_generations: Dict[CacheKey, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self._storage)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._storage

    def get(self, key: CacheKey) -> Optional[AnalysisResult]:
        return self._storage.get(key)

    def set(self, key: CacheKey, result: AnalysisResult) -> None:
        self._storage[key] = result

    def _lock_for(self, key: CacheKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _generation(self, key: CacheKey) -> Tuple[int, int, int]:
        # Caller holds the registry lock.
        return (
            self._epoch,
            self._change_generations[key.change_key],
            self._key_generations[key],
        )

    def get_or_compute(
        self,
        key: CacheKey,
        compute: Callable[[], AnalysisResult],
    ) -> AnalysisResult:
        """
        Return the cached result for key, computing and storing it if absent.

        Args:
            key: Cache key
            compute: Zero-argument callable producing the result

        Returns:
            AnalysisResult: The cached instance, or a fresh uncached result
            when the key was cleared while it was being computed
        """
        cached = self._storage.get(key)
        if cached is not None:
            return cached

        with self._lock_for(key):
            # Another caller may have finished while we waited.
            cached = self._storage.get(key)
            if cached is not None:
                return cached

            with self._registry_lock:
                started = self._generation(key)

            result = compute()

            with self._registry_lock:
                if self._generation(key) == started:
                    self._storage[key] = result
                else:
                    logger.info(
                        "Discarding result of a cleared analysis",
                        extra={"cache_key": str(key)},
                    )
            return result

    def clear(self, key: Optional[CacheKey] = None) -> int:
        """
        Remove one entry, or every entry when no key is given.

        Args:
            key: Entry to remove

        Returns:
            int: Number of entries removed
        """
        with self._registry_lock:
            if key is None:
                removed = len(self._storage)
                self._storage.clear()
                self._epoch += 1
            else:
                removed = 1 if self._storage.pop(key, None) is not None else 0
                self._key_generations[key] += 1

        logger.info(
            "Analysis cache cleared",
            extra={"cache_key": str(key) if key else "*", "removed": removed},
        )
        return removed

    def clear_change(self, change_key: str) -> int:
        """
        Remove the entries of every branch of one change.

        Args:
            change_key: Change identifier

        Returns:
            int: Number of entries removed
        """
        with self._registry_lock:
            keys = [k for k in list(self._storage.keys()) if k.change_key == change_key]
            for k in keys:
                self._storage.pop(k, None)
            self._change_generations[change_key] += 1

        logger.info(
            "Analysis cache cleared for change",
            extra={"change_key": change_key, "removed": len(keys)},
        )
        return len(keys)
