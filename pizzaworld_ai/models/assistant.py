from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import FrozenSet, Iterable, Literal, Mapping, Optional, Tuple

from pizzaworld_ai.models.scope import ScopeKey
from pizzaworld_ai.shared.numbers import numeric_literals

Author = Literal["user", "assistant"]
TtlClass = Literal["critical", "standard"]
FailureKind = Literal["timeout", "unavailable", "malformed_response"]
AnswerSource = Literal["generated", "fallback"]


@dataclass(frozen=True)
class ContextEntry:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class BusinessContext:
    """Presentation-ready snapshot of aggregate metrics for one scope key.

    ``numeric_literals`` is always derived from the entries' presentation
    values, so build instances through :meth:`create`.
    """

    scope_key: ScopeKey
    entries: Tuple[ContextEntry, ...]
    values: Mapping[str, float]
    numeric_literals: FrozenSet[str]
    created_at: float
    quality_issues: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        scope_key: ScopeKey,
        entries: Iterable[ContextEntry],
        values: Mapping[str, float],
        created_at: float,
        quality_issues: Iterable[str] = (),
    ) -> "BusinessContext":
        entries = tuple(entries)
        return cls(
            scope_key=scope_key,
            entries=entries,
            values=MappingProxyType(dict(values)),
            numeric_literals=numeric_literals(entry.value for entry in entries),
            created_at=created_at,
            quality_issues=tuple(quality_issues),
        )

    @property
    def category(self) -> str:
        return self.scope_key.category

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for entry in self.entries:
            if entry.key == key:
                return entry.value
        return default

    def entry(self, key: str) -> Optional[ContextEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None


@dataclass(frozen=True)
class CacheEntry:
    context: BusinessContext
    inserted_at: float
    ttl_class: TtlClass


@dataclass(frozen=True)
class ChatExchange:
    session_id: str
    author: Author
    text: str
    category: str
    timestamp: datetime


@dataclass(frozen=True)
class ValidationOutcome:
    accepted: bool
    rejected_tokens: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class BackendFailure:
    kind: FailureKind
    detail: str = ""


@dataclass(frozen=True)
class ChatReply:
    session_id: str
    answer: str
    category: str
    source: AnswerSource
    timestamp: datetime
    fallback_reason: Optional[str] = None
    rejected_tokens: FrozenSet[str] = field(default_factory=frozenset)
