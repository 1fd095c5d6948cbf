from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from pizzaworld_ai.core.errors import MissingScopeError, UnknownRoleError

# Aggregate datasets a metrics provider can serve.
KPIS = "kpis"
REVENUE_BY_YEAR = "revenue_by_year"
REVENUE_BY_MONTH = "revenue_by_month"
ORDERS_BY_MONTH = "orders_by_month"
TOP_STORES = "top_stores"
TOP_PRODUCTS = "top_products"
CATEGORY_PERFORMANCE = "category_performance"
TOP_STATES = "top_states"
HOURLY_PERFORMANCE = "hourly_performance"
AVAILABLE_YEARS = "available_years"

CORE_FIELDS = ("total_revenue", "total_orders", "avg_order_value")


@dataclass(frozen=True)
class HqScope:
    role: ClassVar[str] = "HQ_ADMIN"
    level: ClassVar[str] = "hq"
    metric_prefix: ClassVar[str] = "Total"
    required_fields: ClassVar[Tuple[str, ...]] = CORE_FIELDS + ("total_customers",)
    analytics_datasets: ClassVar[Tuple[str, ...]] = (
        REVENUE_BY_YEAR,
        REVENUE_BY_MONTH,
        ORDERS_BY_MONTH,
        TOP_STORES,
        TOP_PRODUCTS,
        CATEGORY_PERFORMANCE,
        TOP_STATES,
        HOURLY_PERFORMANCE,
        AVAILABLE_YEARS,
    )

    @property
    def scope_id(self) -> Optional[str]:
        return None

    @property
    def label(self) -> str:
        return "company-wide"

    @property
    def entity(self) -> str:
        return "company"


@dataclass(frozen=True)
class StateScope:
    state_abbr: str

    role: ClassVar[str] = "STATE_MANAGER"
    level: ClassVar[str] = "state"
    metric_prefix: ClassVar[str] = "State"
    required_fields: ClassVar[Tuple[str, ...]] = CORE_FIELDS
    analytics_datasets: ClassVar[Tuple[str, ...]] = (
        REVENUE_BY_YEAR,
        REVENUE_BY_MONTH,
        ORDERS_BY_MONTH,
        TOP_STORES,
        TOP_PRODUCTS,
    )

    @property
    def scope_id(self) -> Optional[str]:
        return self.state_abbr

    @property
    def label(self) -> str:
        return f"state {self.state_abbr}"

    @property
    def entity(self) -> str:
        return "state"


@dataclass(frozen=True)
class StoreScope:
    store_id: str

    role: ClassVar[str] = "STORE_MANAGER"
    level: ClassVar[str] = "store"
    metric_prefix: ClassVar[str] = "Store"
    required_fields: ClassVar[Tuple[str, ...]] = CORE_FIELDS
    analytics_datasets: ClassVar[Tuple[str, ...]] = (
        REVENUE_BY_YEAR,
        REVENUE_BY_MONTH,
        ORDERS_BY_MONTH,
        TOP_PRODUCTS,
        HOURLY_PERFORMANCE,
    )

    @property
    def scope_id(self) -> Optional[str]:
        return self.store_id

    @property
    def label(self) -> str:
        return f"store {self.store_id}"

    @property
    def entity(self) -> str:
        return "store"


RoleScope = Union[HqScope, StateScope, StoreScope]


def parse_role_scope(
    role: str,
    state_abbr: Optional[str] = None,
    store_id: Optional[str] = None,
) -> RoleScope:
    normalized = (role or "").strip().upper()
    if normalized == HqScope.role:
        return HqScope()
    if normalized == StateScope.role:
        if not state_abbr or not state_abbr.strip():
            raise MissingScopeError(normalized, "state_abbr")
        return StateScope(state_abbr=state_abbr.strip().upper())
    if normalized == StoreScope.role:
        if not store_id or not store_id.strip():
            raise MissingScopeError(normalized, "store_id")
        return StoreScope(store_id=store_id.strip())
    raise UnknownRoleError(role)


@dataclass(frozen=True)
class ScopeKey:
    scope: RoleScope
    category: str

    def __str__(self) -> str:
        parts = [self.scope.role, self.category]
        if self.scope.scope_id:
            parts.append(self.scope.scope_id)
        return "|".join(parts)
