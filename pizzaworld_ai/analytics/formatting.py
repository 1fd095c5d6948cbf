from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from pizzaworld_ai.analytics.metrics_normalizer import extract_integer, extract_numeric


def format_currency(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_number(value: int) -> str:
    return f"{value:,d}"


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def _join(parts: Iterable[str]) -> str:
    return ", ".join(part for part in parts if part)


def _label(record: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def format_revenue_series(
    records: List[Dict[str, Any]], period_key: str, limit: int = 3, prefix: str = ""
) -> str:
    parts: List[str] = []
    for record in records[:limit]:
        period = _label(record, period_key)
        revenue = extract_numeric(record, "revenue", "total_revenue")
        if period is None or revenue is None:
            continue
        parts.append(f"{prefix}{period}: {format_currency(revenue)}")
    return _join(parts)


def format_order_series(records: List[Dict[str, Any]], limit: int = 3) -> str:
    parts: List[str] = []
    for record in records[:limit]:
        month = _label(record, "month")
        orders = extract_integer(record, "orders", "total_orders")
        if month is None or orders is None:
            continue
        parts.append(f"{month}: {format_number(orders)} orders")
    return _join(parts)


def format_ranked_revenue(
    records: List[Dict[str, Any]],
    name_keys: tuple[str, ...],
    limit: int = 5,
    detail_key: Optional[str] = None,
) -> str:
    parts: List[str] = []
    for record in records[:limit]:
        name = _label(record, *name_keys)
        revenue = extract_numeric(record, "total_revenue", "revenue")
        if name is None or revenue is None:
            continue
        detail = _label(record, detail_key) if detail_key else None
        if detail:
            parts.append(f"{name} ({detail}): {format_currency(revenue)}")
        else:
            parts.append(f"{name}: {format_currency(revenue)}")
    return _join(parts)


def format_peak_hour(records: List[Dict[str, Any]]) -> str:
    best_hour: Optional[str] = None
    best_revenue: Optional[float] = None
    for record in records:
        hour = _label(record, "hour")
        revenue = extract_numeric(record, "revenue", "total_revenue")
        if hour is None or revenue is None:
            continue
        if best_revenue is None or revenue > best_revenue:
            best_hour, best_revenue = hour, revenue
    if best_hour is None or best_revenue is None:
        return ""
    return f"Peak hour {best_hour}:00 with {format_currency(best_revenue)} revenue"


def format_available_years(records: List[Dict[str, Any]]) -> str:
    years = [_label(record, "year") for record in records]
    return _join(year for year in years if year)
