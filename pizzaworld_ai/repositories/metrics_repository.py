from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import httpx

from pizzaworld_ai.core.supabase import SupabaseClient
from pizzaworld_ai.models.scope import (
    AVAILABLE_YEARS,
    CATEGORY_PERFORMANCE,
    HOURLY_PERFORMANCE,
    KPIS,
    ORDERS_BY_MONTH,
    REVENUE_BY_MONTH,
    REVENUE_BY_YEAR,
    TOP_PRODUCTS,
    TOP_STATES,
    TOP_STORES,
    RoleScope,
    StateScope,
    StoreScope,
)
from pizzaworld_ai.services.collaborators import AggregateResult

logger = logging.getLogger(__name__)

# dataset -> (view suffix, order, limit); the view for a scope is "<dataset view>_<level>".
DATASET_VIEWS: Dict[str, Tuple[str, Optional[str], Optional[int]]] = {
    KPIS: ("kpis", None, 1),
    REVENUE_BY_YEAR: ("revenue_by_year", "year.desc", 5),
    REVENUE_BY_MONTH: ("revenue_by_month", "month.desc", 3),
    ORDERS_BY_MONTH: ("orders_by_month", "month.desc", 3),
    TOP_STORES: ("store_performance", "total_revenue.desc", 5),
    TOP_PRODUCTS: ("product_performance", "total_revenue.desc", 5),
    CATEGORY_PERFORMANCE: ("category_performance", "total_revenue.desc", 3),
    TOP_STATES: ("state_performance", "total_revenue.desc", 5),
    HOURLY_PERFORMANCE: ("hourly_performance", "hour.asc", 24),
    AVAILABLE_YEARS: ("available_years", "year.asc", None),
}
SINGLE_ROW_DATASETS = frozenset({KPIS})


class MetricsRepository:
    """Serves role-scoped aggregates from the dashboard's materialized views."""

    def __init__(self, client: Optional[SupabaseClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> SupabaseClient:
        # Missing Supabase config surfaces as a failed fetch, not a startup error.
        if self._client is None:
            self._client = SupabaseClient()
        return self._client

    def fetch_aggregate(self, scope: RoleScope, dataset: str) -> AggregateResult:
        view_spec = DATASET_VIEWS.get(dataset)
        if view_spec is None:
            logger.warning("Unknown aggregate dataset requested: %s", dataset)
            return None
        view_name, order, limit = view_spec
        try:
            rows = self.client.select(
                view=f"{view_name}_{scope.level}",
                filters=self._scope_filters(scope),
                order=order,
                limit=limit,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Aggregate fetch failed for %s/%s: %s", scope.level, dataset, exc
            )
            return None
        if dataset in SINGLE_ROW_DATASETS:
            return rows[0] if rows else None
        return rows

    @staticmethod
    def _scope_filters(scope: RoleScope) -> List[Tuple[str, str]]:
        if isinstance(scope, StateScope):
            return [("state_abbr", f"eq.{scope.state_abbr}")]
        if isinstance(scope, StoreScope):
            return [("storeid", f"eq.{scope.store_id}")]
        return []
