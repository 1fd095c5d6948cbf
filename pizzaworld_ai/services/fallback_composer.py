from __future__ import annotations

from typing import List, Optional, Sequence

from pizzaworld_ai.models.assistant import BusinessContext

# Static template text must never contain currency amounts or comma-grouped
# numbers; every figure in a fallback answer comes from the context.
SNAPSHOT_KEYS = ("total_revenue", "total_orders", "avg_order_value", "total_customers", "total_stores")
TREND_KEYS = ("yoy_growth_rate", "yoy_growth_absolute", "revenue_trends", "monthly_trends", "orders_trends")
RANKING_KEYS = ("top_stores", "top_products", "category_performance", "top_states", "peak_hour")

PASSWORD_HELP = (
    "I can help with password issues. For security reasons, please use the secure "
    "password reset link on the login page, or contact your administrator if the "
    "reset email does not arrive."
)
SUPPORT_HELP = (
    "I'm here to help. Can you describe the issue in more detail? I can assist with "
    "account access, data questions, or point you to the right support team."
)
ANALYTICS_INTRO = "Here is the latest snapshot for {label}:"
ANALYTICS_EMPTY = (
    "I don't have analytics data for {label} right now. Please try again shortly "
    "or open the dashboard for the full reports."
)
ANALYTICS_HINT = (
    "Ask about revenue, orders, stores, or products for more detail."
)
GREETING = (
    "Hello! I'm your PizzaWorld assistant. I can answer questions about revenue, "
    "orders, stores, and products, and help with account or access issues."
)


def _lines(context: BusinessContext, keys: Sequence[str]) -> List[str]:
    lines = []
    for key in keys:
        entry = context.entry(key)
        if entry is not None:
            lines.append(f"- {entry.label}: {entry.value}")
    return lines


def _access_help(context: BusinessContext) -> str:
    scope = context.scope_key.scope
    return (
        f"Access depends on your role. As {scope.role} you can see data for "
        f"{scope.label}. Tell me which page or report you are trying to open and "
        "I'll check what might be blocking it."
    )


def _support(context: BusinessContext, query: Optional[str]) -> str:
    lowered = (query or "").lower()
    if "password" in lowered or "login" in lowered:
        return PASSWORD_HELP
    if "access" in lowered or "permission" in lowered:
        return _access_help(context)
    return SUPPORT_HELP


def _analytics(context: BusinessContext) -> str:
    label = context.scope_key.scope.label
    snapshot = _lines(context, SNAPSHOT_KEYS)
    if not snapshot:
        return ANALYTICS_EMPTY.format(label=label)
    parts = [ANALYTICS_INTRO.format(label=label), *snapshot]
    extras = _lines(context, TREND_KEYS) + _lines(context, RANKING_KEYS)
    if extras:
        parts.append("")
        parts.extend(extras)
    parts.append("")
    parts.append(ANALYTICS_HINT)
    return "\n".join(parts)


def _general(context: BusinessContext) -> str:
    snapshot = _lines(context, SNAPSHOT_KEYS)
    if not snapshot:
        return GREETING
    label = context.scope_key.scope.label
    return "\n".join([GREETING, "", ANALYTICS_INTRO.format(label=label), *snapshot])


def compose(category: str, context: BusinessContext, query: Optional[str] = None) -> str:
    """Deterministic answer built only from the context's presentation values."""
    if category == "support":
        return _support(context, query)
    if category == "analytics":
        return _analytics(context)
    return _general(context)
