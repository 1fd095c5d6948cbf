from __future__ import annotations

SUPPORT = "support"
ANALYTICS = "analytics"
GENERAL = "general"

SUPPORT_KEYWORDS = ("help", "support", "problem", "password", "login", "access")
ANALYTICS_KEYWORDS = (
    "revenue",
    "sales",
    "analytics",
    "performance",
    "data",
    "orders",
    "growth",
    "trend",
    "store",
    "product",
    "customer",
)


def categorize(query: str) -> str:
    lowered = (query or "").lower()
    if any(keyword in lowered for keyword in SUPPORT_KEYWORDS):
        return SUPPORT
    if any(keyword in lowered for keyword in ANALYTICS_KEYWORDS):
        return ANALYTICS
    return GENERAL
