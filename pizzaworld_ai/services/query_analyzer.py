from __future__ import annotations

from typing import List, Sequence, Tuple

from pizzaworld_ai.models.assistant import BusinessContext

ROUTES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("revenue", ("revenue", "sales")),
    ("customer", ("customer", "retention")),
    ("store", ("store", "performance")),
    ("product", ("product", "menu")),
)
ANSWER_KEYS = {
    "revenue": ("total_revenue", "total_orders", "avg_order_value", "yoy_growth_rate", "revenue_trends"),
    "customer": ("total_customers", "total_orders", "avg_order_value"),
    "store": ("top_stores", "total_stores", "peak_hour", "total_revenue"),
    "product": ("top_products", "category_performance"),
}
HEADINGS = {
    "revenue": "Revenue insights for {label}:",
    "customer": "Customer insights for {label}:",
    "store": "Store performance for {label}:",
    "product": "Product insights for {label}:",
}
UNAVAILABLE = {
    "revenue": "I'm unable to retrieve revenue data at the moment. Please try again shortly.",
    "customer": (
        "Customer analytics are available in the Customer Analytics section, including "
        "lifetime value, retention and acquisition trends."
    ),
    "store": "Store performance data is not available for {label} right now.",
    "product": (
        "Product performance is available in the Products section, including top sellers "
        "and category trends."
    ),
}
GENERAL_ANSWER = (
    "I can help you analyze revenue, customers, stores, and products. Try asking "
    "\"What's our top performing store?\" or \"How are sales trending?\""
)


def route(query: str) -> str:
    lowered = (query or "").lower()
    for kind, keywords in ROUTES:
        if any(keyword in lowered for keyword in keywords):
            return kind
    return "general"


def _lines(context: BusinessContext, keys: Sequence[str]) -> List[str]:
    lines = []
    for key in keys:
        entry = context.entry(key)
        if entry is not None:
            lines.append(f"- {entry.label}: {entry.value}")
    return lines


def answer(kind: str, context: BusinessContext) -> str:
    """Deterministic, context-only answer for a routed query kind."""
    if kind not in ANSWER_KEYS:
        return GENERAL_ANSWER
    label = context.scope_key.scope.label
    lines = _lines(context, ANSWER_KEYS[kind])
    if not lines:
        return UNAVAILABLE[kind].format(label=label)
    return "\n".join([HEADINGS[kind].format(label=label), *lines])
