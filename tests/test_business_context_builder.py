from __future__ import annotations

from fakes import FakeClock, FakeMetricsProvider

from pizzaworld_ai.models.scope import KPIS, REVENUE_BY_YEAR, HqScope, ScopeKey, StateScope
from pizzaworld_ai.services.business_context_builder import BusinessContextBuilder

HQ_ANALYTICS = ScopeKey(scope=HqScope(), category="analytics")


class ExplodingProvider:
    def fetch_aggregate(self, scope, dataset):
        raise RuntimeError("view missing")


def test_build_formats_kpis_and_reference_literals(settings) -> None:
    builder = BusinessContextBuilder(FakeMetricsProvider(), settings=settings)
    context = builder.build(HQ_ANALYTICS)

    assert context.get("total_revenue") == "$50,211,527.85"
    assert context.get("total_orders") == "2,046,713"
    assert context.get("avg_order_value") == "$24.53"
    assert context.get("total_customers") == "23,145"
    assert context.entry("total_revenue").label == "Total Revenue"
    assert {"50211527.85", "2046713", "24.53", "23145"} <= context.numeric_literals
    assert context.quality_issues == ()


def test_trend_datasets_only_for_trend_categories(settings) -> None:
    provider = FakeMetricsProvider()
    builder = BusinessContextBuilder(provider, settings=settings)

    general = builder.build(ScopeKey(scope=HqScope(), category="general"))
    assert provider.calls == [("hq", KPIS)]
    assert "revenue_trends" not in general

    analytics = builder.build(HQ_ANALYTICS)
    assert ("hq", REVENUE_BY_YEAR) in provider.calls
    assert analytics.get("yoy_growth_rate") == "13.85%"
    assert analytics.get("yoy_growth_absolute") == "$2,249,999.50"
    assert analytics.get("top_stores").startswith("S490972 (Las Vegas): $1,310,552.40")


def test_scope_specific_labels(settings) -> None:
    builder = BusinessContextBuilder(FakeMetricsProvider(), settings=settings)
    context = builder.build(ScopeKey(scope=StateScope(state_abbr="TX"), category="general"))
    assert context.entry("total_revenue").label == "State Revenue"
    assert context.get("scope") == "state TX"


def test_implausible_values_are_dropped_and_recorded(settings) -> None:
    provider = FakeMetricsProvider({KPIS: {"total_revenue": -5, "total_orders": 10, "total_customers": 3}})
    context = BusinessContextBuilder(provider, settings=settings).build(HQ_ANALYTICS)

    assert "total_revenue" not in context
    assert context.get("total_orders") == "10"
    assert "total_revenue is negative" in context.quality_issues
    assert "missing total_revenue" in context.quality_issues


def test_average_order_value_mismatch_is_flagged(settings) -> None:
    provider = FakeMetricsProvider(
        {KPIS: {"total_revenue": 1000, "total_orders": 10, "avg_order_value": 150, "total_customers": 4}}
    )
    context = BusinessContextBuilder(provider, settings=settings).build(HQ_ANALYTICS)

    assert context.get("avg_order_value") == "$150.00"
    assert any(issue.startswith("avg_order_value inconsistency") for issue in context.quality_issues)


def test_provider_failure_yields_partial_context(settings) -> None:
    context = BusinessContextBuilder(ExplodingProvider(), settings=settings).build(HQ_ANALYTICS)

    assert [entry.key for entry in context.entries] == ["scope"]
    assert "missing total_revenue" in context.quality_issues


def test_build_is_idempotent(settings) -> None:
    clock = FakeClock()
    builder = BusinessContextBuilder(FakeMetricsProvider(), settings=settings, clock=clock)
    first = builder.build(HQ_ANALYTICS)
    second = builder.build(HQ_ANALYTICS)
    assert first.entries == second.entries
    assert first.numeric_literals == second.numeric_literals
    assert dict(first.values) == dict(second.values)
