from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Union

from pizzaworld_ai.models.assistant import BackendFailure
from pizzaworld_ai.models.scope import RoleScope

AggregateResult = Union[Dict[str, Any], List[Dict[str, Any]], None]


class MetricsProvider(Protocol):
    def fetch_aggregate(self, scope: RoleScope, dataset: str) -> AggregateResult:
        """Role-scoped aggregate rows; empty or ``None`` when unavailable."""
        ...


class GenerativeBackend(Protocol):
    def generate(self, prompt: str, timeout: Optional[float] = None) -> Union[str, BackendFailure]:
        ...

    def is_available(self) -> bool:
        ...

    def config_info(self) -> Dict[str, Any]:
        ...


class KnowledgeRetriever(Protocol):
    def find_snippet(self, query: str) -> Optional[str]:
        ...

    def chunk_count(self) -> int:
        ...
