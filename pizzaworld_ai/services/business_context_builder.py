from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pizzaworld_ai.analytics.formatting import (
    format_available_years,
    format_currency,
    format_number,
    format_order_series,
    format_peak_hour,
    format_percent,
    format_ranked_revenue,
    format_revenue_series,
)
from pizzaworld_ai.analytics.metrics_normalizer import extract_integer, extract_numeric
from pizzaworld_ai.core.config import Settings, get_settings
from pizzaworld_ai.models.assistant import BusinessContext, ContextEntry
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
    ScopeKey,
)
from pizzaworld_ai.services.collaborators import MetricsProvider

logger = logging.getLogger(__name__)

TREND_CATEGORIES = frozenset({"analytics"})


class _ContextDraft:
    def __init__(self) -> None:
        self.entries: List[ContextEntry] = []
        self.values: Dict[str, float] = {}
        self.issues: List[str] = []

    def add(self, key: str, label: str, value: str, numeric: Optional[float] = None) -> None:
        if not value:
            return
        self.entries.append(ContextEntry(key=key, label=label, value=value))
        if numeric is not None:
            self.values[key] = numeric

    def has(self, key: str) -> bool:
        return any(entry.key == key for entry in self.entries)


class BusinessContextBuilder:
    def __init__(
        self,
        provider: MetricsProvider,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider
        self.settings = settings or get_settings()
        self.clock = clock

    def build(self, scope_key: ScopeKey) -> BusinessContext:
        scope = scope_key.scope
        draft = _ContextDraft()
        draft.add("scope", "Scope", scope.label)

        self._add_kpis(scope, draft)
        if scope_key.category in TREND_CATEGORIES:
            for dataset in scope.analytics_datasets:
                self._add_dataset(scope, dataset, draft)

        for field_name in scope.required_fields:
            if not draft.has(field_name):
                draft.issues.append(f"missing {field_name}")
        if draft.issues:
            logger.warning(
                "Data quality issues for %s: %s", scope_key, ", ".join(draft.issues)
            )

        return BusinessContext.create(
            scope_key=scope_key,
            entries=draft.entries,
            values=draft.values,
            created_at=self.clock(),
            quality_issues=draft.issues,
        )

    def _fetch(self, scope: RoleScope, dataset: str) -> Any:
        try:
            return self.provider.fetch_aggregate(scope, dataset)
        except Exception as exc:
            logger.warning("Metrics provider failed for %s/%s: %s", scope.level, dataset, exc)
            return None

    def _fetch_rows(self, scope: RoleScope, dataset: str) -> List[Dict[str, Any]]:
        result = self._fetch(scope, dataset)
        if isinstance(result, dict):
            return [result]
        if not isinstance(result, list):
            return []
        return [row for row in result if isinstance(row, dict)]

    def _add_kpis(self, scope: RoleScope, draft: _ContextDraft) -> None:
        kpis = self._fetch(scope, KPIS)
        if isinstance(kpis, list):
            kpis = kpis[0] if kpis else None
        if kpis is None:
            return

        prefix = scope.metric_prefix
        revenue = self._bounded(
            "total_revenue",
            extract_numeric(kpis, "total_revenue", "revenue"),
            self.settings.revenue_ceiling,
            draft,
        )
        orders = self._bounded(
            "total_orders",
            extract_integer(kpis, "total_orders", "orders"),
            self.settings.orders_ceiling,
            draft,
        )
        customers = self._bounded(
            "total_customers",
            extract_integer(kpis, "total_customers", "customers"),
            None,
            draft,
        )
        stores = self._bounded(
            "total_stores",
            extract_integer(kpis, "total_stores", "stores"),
            None,
            draft,
        )
        upstream_aov = extract_numeric(kpis, "avg_order_value", "average_order_value")

        avg_order_value = upstream_aov
        if revenue is not None and orders:
            derived_aov = revenue / orders
            if upstream_aov is None:
                avg_order_value = derived_aov
            elif abs(derived_aov - upstream_aov) > self.settings.avg_order_value_tolerance:
                draft.issues.append(
                    f"avg_order_value inconsistency: calculated {derived_aov:.2f} vs stated {upstream_aov:.2f}"
                )
        avg_order_value = self._bounded(
            "avg_order_value",
            avg_order_value,
            self.settings.avg_order_value_ceiling,
            draft,
        )

        if revenue is not None:
            draft.add("total_revenue", f"{prefix} Revenue", format_currency(revenue), revenue)
        if orders is not None:
            draft.add("total_orders", f"{prefix} Orders", format_number(int(orders)), orders)
        if avg_order_value is not None:
            draft.add(
                "avg_order_value",
                "Average Order Value",
                format_currency(avg_order_value),
                avg_order_value,
            )
        if customers is not None:
            draft.add("total_customers", "Total Customers", format_number(int(customers)), customers)
        if stores:
            draft.add("total_stores", "Stores", format_number(int(stores)), stores)

    def _bounded(
        self,
        key: str,
        value: Optional[float],
        ceiling: Optional[float],
        draft: _ContextDraft,
    ) -> Optional[float]:
        if value is None:
            return None
        if value < 0:
            draft.issues.append(f"{key} is negative")
            logger.warning("Dropping negative %s: %s", key, value)
            return None
        if ceiling is not None and value > ceiling:
            draft.issues.append(f"{key} exceeds {ceiling:,.0f}")
            logger.warning("Dropping implausible %s: %s", key, value)
            return None
        return value

    def _add_dataset(self, scope: RoleScope, dataset: str, draft: _ContextDraft) -> None:
        rows = self._fetch_rows(scope, dataset)
        if not rows:
            return
        if dataset == REVENUE_BY_YEAR:
            self._add_yearly_revenue(rows, draft)
        elif dataset == REVENUE_BY_MONTH:
            draft.add("monthly_trends", "Recent Monthly Revenue", format_revenue_series(rows, "month"))
        elif dataset == ORDERS_BY_MONTH:
            draft.add("orders_trends", "Recent Monthly Orders", format_order_series(rows))
        elif dataset == TOP_STORES:
            draft.add(
                "top_stores",
                "Top Stores",
                format_ranked_revenue(rows, ("storeid", "store_id"), detail_key="city"),
            )
        elif dataset == TOP_PRODUCTS:
            draft.add(
                "top_products",
                "Top Products",
                format_ranked_revenue(rows, ("name", "product_name")),
            )
        elif dataset == CATEGORY_PERFORMANCE:
            draft.add(
                "category_performance",
                "Category Performance",
                format_ranked_revenue(rows, ("category",), limit=3),
            )
        elif dataset == TOP_STATES:
            draft.add("top_states", "Top States", format_ranked_revenue(rows, ("state_abbr", "state")))
        elif dataset == HOURLY_PERFORMANCE:
            draft.add("peak_hour", "Peak Hour", format_peak_hour(rows))
        elif dataset == AVAILABLE_YEARS:
            draft.add("available_years", "Available Years", format_available_years(rows))
        else:
            logger.debug("No formatter for dataset %s", dataset)

    def _add_yearly_revenue(self, rows: List[Dict[str, Any]], draft: _ContextDraft) -> None:
        yearly = [
            (year, revenue)
            for year, revenue in (
                (extract_integer(row, "year"), extract_numeric(row, "revenue", "total_revenue"))
                for row in rows
            )
            if year is not None and revenue is not None
        ]
        yearly.sort(key=lambda item: item[0], reverse=True)
        ordered_rows = [{"year": year, "revenue": revenue} for year, revenue in yearly]
        draft.add("revenue_trends", "Revenue Trends", format_revenue_series(ordered_rows, "year"))

        if len(yearly) < 2:
            return
        current_revenue = yearly[0][1]
        previous_revenue = yearly[1][1]
        if previous_revenue <= 0:
            return
        growth_rate = (current_revenue - previous_revenue) / previous_revenue * 100
        growth_absolute = current_revenue - previous_revenue
        draft.add("yoy_growth_rate", "Year-over-Year Growth", format_percent(growth_rate), growth_rate)
        draft.add(
            "yoy_growth_absolute",
            "Year-over-Year Change",
            format_currency(growth_absolute),
            growth_absolute,
        )
