from __future__ import annotations

from functools import singledispatch
from typing import List, Sequence

from pizzaworld_ai.models.assistant import BusinessContext
from pizzaworld_ai.models.scope import HqScope, StateScope, StoreScope
from pizzaworld_ai.schemas.assistant import InsightEvidence, InsightRecord

# Confidence drops by this much when the context carries data-quality issues.
QUALITY_PENALTY = 0.15


def _evidence(context: BusinessContext, keys: Sequence[str]) -> List[InsightEvidence]:
    evidence = []
    for key in keys:
        value = context.get(key)
        if value is not None:
            evidence.append(InsightEvidence(metric=key, value=value))
    return evidence


def _confidence(base: float, context: BusinessContext) -> float:
    if context.quality_issues:
        return round(max(base - QUALITY_PENALTY, 0.0), 2)
    return base


def _revenue_summary(context: BusinessContext, subject: str) -> str:
    revenue = context.get("total_revenue")
    if revenue is None:
        return f"Revenue data for {subject} is currently unavailable."
    sentence = f"Revenue for {subject} stands at {revenue}"
    orders = context.get("total_orders")
    if orders is not None:
        sentence += f" across {orders} orders"
    return sentence + "."


def _growth_sentence(context: BusinessContext) -> str:
    rate = context.get("yoy_growth_rate")
    if rate is None:
        return ""
    change = context.get("yoy_growth_absolute")
    direction = "down" if context.values.get("yoy_growth_rate", 0) < 0 else "up"
    sentence = f" Year over year revenue is {direction} {rate.lstrip('-')}"
    if change is not None:
        sentence += f" ({change})"
    return sentence + "."


def _growth_priority(context: BusinessContext) -> str:
    growth = context.values.get("yoy_growth_rate")
    if growth is None:
        return "medium"
    return "high" if growth < 0 else "medium"


@singledispatch
def generate_insights(scope: object, context: BusinessContext) -> List[InsightRecord]:
    raise TypeError(f"Unsupported scope: {scope!r}")


@generate_insights.register
def _hq_insights(scope: HqScope, context: BusinessContext) -> List[InsightRecord]:
    revenue = InsightRecord(
        insight_type="performance",
        title="Revenue Performance",
        description=_revenue_summary(context, "the company") + _growth_sentence(context),
        category="revenue",
        target_entity=scope.entity,
        confidence=_confidence(0.85, context),
        priority=_growth_priority(context),
        recommendation="Continue current strategies while exploring expansion opportunities.",
        is_actionable="total_revenue" in context,
        evidence=_evidence(
            context,
            ("total_revenue", "total_orders", "avg_order_value", "yoy_growth_rate", "yoy_growth_absolute"),
        ),
    )

    top_stores = context.get("top_stores")
    if top_stores:
        store_description = f"Leading stores by revenue: {top_stores}."
    else:
        store_description = "Store ranking data is currently unavailable."
    stores = InsightRecord(
        insight_type="optimization",
        title="Store Optimization",
        description=store_description,
        category="operations",
        target_entity="stores",
        confidence=_confidence(0.78, context),
        priority="medium",
        recommendation="Focus on underperforming stores with targeted training and resource allocation.",
        is_actionable=bool(top_stores),
        evidence=_evidence(context, ("top_stores", "total_stores", "top_states")),
    )
    return [revenue, stores]


@generate_insights.register
def _state_insights(scope: StateScope, context: BusinessContext) -> List[InsightRecord]:
    description = _revenue_summary(context, f"state {scope.state_abbr}") + _growth_sentence(context)
    top_stores = context.get("top_stores")
    if top_stores:
        description += f" Top stores: {top_stores}."
    return [
        InsightRecord(
            insight_type="regional",
            title="State Performance",
            description=description,
            category="regional",
            target_entity=scope.entity,
            target_entity_id=scope.state_abbr,
            confidence=_confidence(0.82, context),
            priority=_growth_priority(context),
            recommendation="Consider expanding successful strategies to neighboring regions.",
            is_actionable="total_revenue" in context,
            evidence=_evidence(
                context,
                ("total_revenue", "total_orders", "avg_order_value", "yoy_growth_rate", "top_stores"),
            ),
        )
    ]


@generate_insights.register
def _store_insights(scope: StoreScope, context: BusinessContext) -> List[InsightRecord]:
    description = _revenue_summary(context, f"store {scope.store_id}") + _growth_sentence(context)
    peak_hour = context.get("peak_hour")
    if peak_hour:
        description += f" {peak_hour}."
    return [
        InsightRecord(
            insight_type="local",
            title="Store Performance",
            description=description,
            category="operations",
            target_entity=scope.entity,
            target_entity_id=scope.store_id,
            confidence=_confidence(0.75, context),
            priority=_growth_priority(context),
            recommendation="Focus on peak hour optimization and customer retention strategies.",
            is_actionable="total_revenue" in context,
            evidence=_evidence(
                context,
                ("total_revenue", "total_orders", "avg_order_value", "peak_hour", "top_products"),
            ),
        )
    ]
