from __future__ import annotations

from typing import Any, Dict, List

import httpx

from pizzaworld_ai.models.scope import KPIS, TOP_STORES, HqScope, StateScope, StoreScope
from pizzaworld_ai.repositories.metrics_repository import MetricsRepository


class FakeSupabaseClient:
    def __init__(self, rows: List[Dict[str, Any]], error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def select(self, view: str, **kwargs: Any) -> List[Dict[str, Any]]:
        self.calls.append({"view": view, **kwargs})
        if self.error is not None:
            raise self.error
        return self.rows


def test_kpis_return_single_row_from_scope_view() -> None:
    client = FakeSupabaseClient([{"total_revenue": 10}])
    repository = MetricsRepository(client=client)

    assert repository.fetch_aggregate(StateScope(state_abbr="NV"), KPIS) == {"total_revenue": 10}
    assert client.calls[0]["view"] == "kpis_state"
    assert client.calls[0]["filters"] == [("state_abbr", "eq.NV")]


def test_ranked_datasets_keep_order_and_limit() -> None:
    client = FakeSupabaseClient([{"storeid": "S1"}, {"storeid": "S2"}])
    repository = MetricsRepository(client=client)

    rows = repository.fetch_aggregate(HqScope(), TOP_STORES)
    assert [row["storeid"] for row in rows] == ["S1", "S2"]
    assert client.calls[0] == {
        "view": "store_performance_hq",
        "filters": [],
        "order": "total_revenue.desc",
        "limit": 5,
    }


def test_store_scope_filters_by_store_id() -> None:
    client = FakeSupabaseClient([])
    MetricsRepository(client=client).fetch_aggregate(StoreScope(store_id="S7"), KPIS)
    assert client.calls[0]["filters"] == [("storeid", "eq.S7")]


def test_transport_errors_become_empty_results() -> None:
    client = FakeSupabaseClient([], error=httpx.ConnectError("down"))
    assert MetricsRepository(client=client).fetch_aggregate(HqScope(), KPIS) is None


def test_unknown_dataset_is_ignored() -> None:
    client = FakeSupabaseClient([{"x": 1}])
    assert MetricsRepository(client=client).fetch_aggregate(HqScope(), "weather") is None
    assert client.calls == []
