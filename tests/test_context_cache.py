from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from fakes import FakeClock

from pizzaworld_ai.models.assistant import BusinessContext
from pizzaworld_ai.models.scope import HqScope, ScopeKey, StoreScope
from pizzaworld_ai.services.context_cache import TTL_CRITICAL, TTL_STANDARD, ContextCache

ANALYTICS_KEY = ScopeKey(scope=HqScope(), category="analytics")
GENERAL_KEY = ScopeKey(scope=HqScope(), category="general")


class CountingBuilder:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, scope_key: ScopeKey) -> BusinessContext:
        self.calls += 1
        return BusinessContext.create(scope_key=scope_key, entries=[], values={}, created_at=0.0)


def test_ttl_class_follows_category() -> None:
    cache = ContextCache()
    assert cache.ttl_class_for("analytics") == TTL_CRITICAL
    assert cache.ttl_class_for("general") == TTL_STANDARD
    assert cache.ttl_class_for("support") == TTL_STANDARD


def test_critical_entry_expires_after_thirty_seconds() -> None:
    clock = FakeClock(start=0.0)
    builder = CountingBuilder()
    cache = ContextCache(clock=clock)

    cache.get_or_build(ANALYTICS_KEY, builder)
    clock.advance(29)
    cache.get_or_build(ANALYTICS_KEY, builder)
    assert builder.calls == 1

    clock.advance(2)
    cache.get_or_build(ANALYTICS_KEY, builder)
    assert builder.calls == 2


def test_entry_at_exact_ttl_is_still_fresh() -> None:
    clock = FakeClock(start=0.0)
    cache = ContextCache(clock=clock)
    cache.get_or_build(ANALYTICS_KEY, CountingBuilder())
    clock.advance(30)
    assert cache.get(ANALYTICS_KEY) is not None


def test_standard_entries_live_longer() -> None:
    clock = FakeClock(start=0.0)
    cache = ContextCache(clock=clock)
    cache.get_or_build(GENERAL_KEY, CountingBuilder())
    clock.advance(45)
    assert cache.get(GENERAL_KEY) is not None
    clock.advance(16)
    assert cache.get(GENERAL_KEY) is None
    assert len(cache) == 0


def test_keys_are_isolated_by_scope_and_category() -> None:
    builder = CountingBuilder()
    cache = ContextCache()
    cache.get_or_build(ANALYTICS_KEY, builder)
    cache.get_or_build(GENERAL_KEY, builder)
    cache.get_or_build(ScopeKey(scope=StoreScope(store_id="S1"), category="analytics"), builder)
    assert builder.calls == 3
    assert len(cache) == 3


def test_sweep_runs_once_cache_grows_past_threshold() -> None:
    clock = FakeClock(start=0.0)
    cache = ContextCache(clock=clock, sweep_threshold=2, rng=lambda: 0.0)
    builder = CountingBuilder()
    cache.get_or_build(ANALYTICS_KEY, builder)
    cache.get_or_build(ScopeKey(scope=StoreScope(store_id="S1"), category="analytics"), builder)
    clock.advance(31)

    cache.get_or_build(GENERAL_KEY, builder)
    assert len(cache) == 1


def test_sweep_skipped_when_random_draw_misses() -> None:
    clock = FakeClock(start=0.0)
    cache = ContextCache(clock=clock, sweep_threshold=2, rng=lambda: 0.99)
    builder = CountingBuilder()
    cache.get_or_build(ANALYTICS_KEY, builder)
    cache.get_or_build(ScopeKey(scope=StoreScope(store_id="S1"), category="analytics"), builder)
    clock.advance(31)

    cache.get_or_build(GENERAL_KEY, builder)
    assert len(cache) == 3
    assert cache.sweep() == 2


def test_invalidate() -> None:
    cache = ContextCache()
    builder = CountingBuilder()
    cache.get_or_build(ANALYTICS_KEY, builder)
    cache.get_or_build(GENERAL_KEY, builder)
    cache.invalidate(ANALYTICS_KEY)
    assert cache.get(ANALYTICS_KEY) is None
    assert cache.get(GENERAL_KEY) is not None
    cache.invalidate()
    assert len(cache) == 0


def test_concurrent_lookups_keep_one_entry_per_key() -> None:
    keys = [
        ScopeKey(scope=scope, category=category)
        for scope in (HqScope(), StoreScope(store_id="S1"), StoreScope(store_id="S2"))
        for category in ("analytics", "general", "support")
    ]
    cache = ContextCache()
    builder = CountingBuilder()

    def lookup(index: int) -> BusinessContext:
        key = keys[index % len(keys)]
        context = cache.get_or_build(key, builder)
        assert context.scope_key == key
        return context

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lookup, range(600)))

    assert len(cache) == len(keys)
    for key in keys:
        cached = cache.get(key)
        assert cached is not None
        assert cached.scope_key == key
