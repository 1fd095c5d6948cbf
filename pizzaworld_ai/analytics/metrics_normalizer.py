from __future__ import annotations

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


def _coerce(value: Any, field_name: str) -> Optional[Decimal]:
    if isinstance(value, bool):
        logger.warning("Ignoring boolean value for numeric field '%s'", field_name)
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            logger.warning("Ignoring non-finite value for field '%s'", field_name)
            return None
        return Decimal(str(value))
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning("Failed to parse numeric value %r for field '%s'", value, field_name)
        return None
    if not parsed.is_finite():
        logger.warning("Ignoring non-finite value %r for field '%s'", value, field_name)
        return None
    return parsed


def _first_float(record: Any, field_names: tuple[str, ...]) -> Optional[float]:
    if not isinstance(record, Mapping):
        if record is not None:
            logger.warning("Expected a mapping record, got %s", type(record).__name__)
        return None
    for field_name in field_names:
        value = record.get(field_name)
        if value is None:
            continue
        parsed = _coerce(value, field_name)
        if parsed is None:
            continue
        as_float = float(parsed)
        if not math.isfinite(as_float):
            logger.warning("Numeric value %r for field '%s' overflows a float", value, field_name)
            continue
        return as_float
    return None


def extract_numeric(record: Any, *field_names: str) -> Optional[float]:
    """Return the first alias that holds a parseable, finite number, as a float."""
    return _first_float(record, field_names)


def extract_integer(record: Any, *field_names: str) -> Optional[int]:
    """Like :func:`extract_numeric` but only accepts whole numbers.

    ``"1200"`` and ``1200.0`` resolve; ``"12.5"`` is logged and skipped so the
    next alias gets a chance.
    """
    if not isinstance(record, Mapping):
        if record is not None:
            logger.warning("Expected a mapping record, got %s", type(record).__name__)
        return None
    for field_name in field_names:
        value = record.get(field_name)
        if value is None:
            continue
        parsed = _coerce(value, field_name)
        if parsed is None:
            continue
        if parsed != parsed.to_integral_value():
            logger.warning("Failed to parse integer value %r for field '%s'", value, field_name)
            continue
        return int(parsed)
    return None
