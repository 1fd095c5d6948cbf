from __future__ import annotations

import logging
import random
import time
from threading import Lock
from typing import Callable, Dict, FrozenSet, Iterable, Optional

from pizzaworld_ai.models.assistant import BusinessContext, CacheEntry, TtlClass
from pizzaworld_ai.models.scope import ScopeKey

logger = logging.getLogger(__name__)

TTL_CRITICAL: TtlClass = "critical"
TTL_STANDARD: TtlClass = "standard"


class ContextCache:
    """Business contexts keyed by scope key, with per-category freshness.

    Concurrent misses on the same key may each run the builder; the last
    store wins. Expired entries are dropped lazily on lookup and by an
    occasional sweep once the cache grows past ``sweep_threshold``.
    """

    def __init__(
        self,
        critical_ttl_seconds: float = 30.0,
        standard_ttl_seconds: float = 60.0,
        critical_categories: Iterable[str] = ("analytics",),
        sweep_threshold: int = 50,
        sweep_probability: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.ttl_seconds: Dict[TtlClass, float] = {
            TTL_CRITICAL: critical_ttl_seconds,
            TTL_STANDARD: standard_ttl_seconds,
        }
        self.critical_categories: FrozenSet[str] = frozenset(critical_categories)
        self.sweep_threshold = sweep_threshold
        self.sweep_probability = sweep_probability
        self.clock = clock
        self.rng = rng
        self._entries: Dict[ScopeKey, CacheEntry] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def ttl_class_for(self, category: str) -> TtlClass:
        return TTL_CRITICAL if category in self.critical_categories else TTL_STANDARD

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at > self.ttl_seconds[entry.ttl_class]

    def get(self, scope_key: ScopeKey) -> Optional[BusinessContext]:
        now = self.clock()
        with self._lock:
            entry = self._entries.get(scope_key)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                del self._entries[scope_key]
                logger.debug("Context cache expired for %s", scope_key)
                return None
            return entry.context

    def get_or_build(
        self,
        scope_key: ScopeKey,
        builder: Callable[[ScopeKey], BusinessContext],
    ) -> BusinessContext:
        cached = self.get(scope_key)
        if cached is not None:
            logger.debug("Context cache hit for %s", scope_key)
            return cached

        logger.debug("Context cache miss for %s", scope_key)
        context = builder(scope_key)
        entry = CacheEntry(
            context=context,
            inserted_at=self.clock(),
            ttl_class=self.ttl_class_for(scope_key.category),
        )
        with self._lock:
            self._entries[scope_key] = entry
            should_sweep = (
                len(self._entries) > self.sweep_threshold
                and self.rng() < self.sweep_probability
            )
        if should_sweep:
            self.sweep()
        return context

    def sweep(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)
        logger.debug("Context cache sweep dropped %d entries, %d remain", len(expired), remaining)
        return len(expired)

    def invalidate(self, scope_key: Optional[ScopeKey] = None) -> None:
        with self._lock:
            if scope_key is None:
                self._entries.clear()
            else:
                self._entries.pop(scope_key, None)
