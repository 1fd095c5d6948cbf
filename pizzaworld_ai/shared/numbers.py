"""Number tokens as they appear in business text.

A token is either a dollar amount (``$`` followed by digits, optionally
comma-grouped, with an optional decimal part) or a comma-grouped number
(``1,234`` or ``1,234.56``). A token always spans the whole digit run it
starts, so ``2,046,713.5`` and ``2,046,7130`` are read whole rather than as a
grouped prefix. Bare integers such as years or store ids and percentages are
not tokens. Both the reference set of a business context and the scan of
generated text go through this module so the two sides always agree.
"""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List

NUMBER_TOKEN_RE = re.compile(
    r"\$\d(?:,?\d)*(?:\.\d+)?"
    r"|(?<![\d.,])\d+(?:,\d{3})+(?:,?\d)*(?:\.\d+)?"
)
ZERO_CENTS = ".00"


def tokenize(text: str) -> List[str]:
    if not text:
        return []
    return NUMBER_TOKEN_RE.findall(text)


def normalize(token: str) -> str:
    return token.replace("$", "").replace(",", "")


def normalized_tokens(text: str) -> List[str]:
    return [normalize(token) for token in tokenize(text)]


def numeric_literals(values: Iterable[str]) -> FrozenSet[str]:
    literals: set[str] = set()
    for value in values:
        literals.update(normalized_tokens(value))
    return frozenset(literals)


def equivalent_forms(normalized: str) -> FrozenSet[str]:
    # "1200" and "1200.00" name the same amount.
    if normalized.endswith(ZERO_CENTS):
        return frozenset({normalized, normalized[: -len(ZERO_CENTS)]})
    if "." not in normalized:
        return frozenset({normalized, normalized + ZERO_CENTS})
    return frozenset({normalized})
