from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union
from uuid import uuid4

from pizzaworld_ai.core.config import Settings, get_settings
from pizzaworld_ai.models.assistant import (
    BackendFailure,
    BusinessContext,
    ChatExchange,
    ChatReply,
)
from pizzaworld_ai.models.scope import RoleScope, ScopeKey
from pizzaworld_ai.schemas.assistant import AnalyzeResponse, AssistantStatus, InsightRecord
from pizzaworld_ai.services import fallback_composer, numeric_guard, query_analyzer
from pizzaworld_ai.services.business_context_builder import BusinessContextBuilder
from pizzaworld_ai.services.collaborators import GenerativeBackend, KnowledgeRetriever, MetricsProvider
from pizzaworld_ai.services.context_cache import ContextCache
from pizzaworld_ai.services.conversation_history import ConversationHistory
from pizzaworld_ai.services.insight_generator import generate_insights
from pizzaworld_ai.services.message_categorizer import ANALYTICS, categorize
from pizzaworld_ai.services.prompt_builder import build_prompt

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssistantService:
    """Role-scoped chat, insights and query analysis over live aggregates.

    Every chat turn ends with an answer: a validated generated reply when the
    backend cooperates, otherwise a deterministic fallback built from the same
    business context.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        backend: GenerativeBackend,
        cache: ContextCache,
        history: ConversationHistory,
        retriever: KnowledgeRetriever | None = None,
        settings: Settings | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings or get_settings()
        self.builder = BusinessContextBuilder(provider, settings=self.settings)
        self.backend = backend
        self.cache = cache
        self.conversations = history
        self.retriever = retriever
        self.now = now

    def context_for(self, scope: RoleScope, category: str) -> BusinessContext:
        return self.cache.get_or_build(ScopeKey(scope=scope, category=category), self.builder.build)

    def chat(self, session_id: Optional[str], user_query: str, scope: RoleScope) -> ChatReply:
        session_id = session_id or str(uuid4())
        category = categorize(user_query)
        context = self.context_for(scope, category)

        window = self.conversations.window(session_id, self.settings.chat_history_window)
        result = self._generate(self._prompt(user_query, context, window))
        answer: str
        fallback_reason: Optional[str] = None
        rejected = frozenset()
        if isinstance(result, BackendFailure):
            fallback_reason = f"backend_{result.kind}"
        else:
            outcome = numeric_guard.validate(result, context)
            if outcome.accepted:
                answer = result
            else:
                fallback_reason = "validation_rejected"
                rejected = outcome.rejected_tokens

        if fallback_reason is not None:
            logger.info("Using fallback answer for %s (%s)", context.scope_key, fallback_reason)
            answer = fallback_composer.compose(category, context, user_query)

        timestamp = self.now()
        self.conversations.append(
            session_id,
            ChatExchange(
                session_id=session_id,
                author="user",
                text=user_query,
                category=category,
                timestamp=timestamp,
            ),
        )
        self.conversations.append(
            session_id,
            ChatExchange(
                session_id=session_id,
                author="assistant",
                text=answer,
                category=category,
                timestamp=timestamp,
            ),
        )
        return ChatReply(
            session_id=session_id,
            answer=answer,
            category=category,
            source="fallback" if fallback_reason else "generated",
            timestamp=timestamp,
            fallback_reason=fallback_reason,
            rejected_tokens=rejected,
        )

    def history(self, session_id: str) -> List[ChatExchange]:
        return self.conversations.history(session_id)

    def insights(self, scope: RoleScope) -> List[InsightRecord]:
        return generate_insights(scope, self.context_for(scope, ANALYTICS))

    def analyze(self, query: str, scope: RoleScope) -> AnalyzeResponse:
        context = self.context_for(scope, ANALYTICS)
        if self.backend.is_available():
            result = self._generate(self._prompt(query, context, []))
            if not isinstance(result, BackendFailure):
                if numeric_guard.validate(result, context).accepted:
                    return AnalyzeResponse(type="ai_analysis", answer=result, source="generated")
            logger.info("Analysis for %s falls back to keyword routing", context.scope_key)

        kind = query_analyzer.route(query)
        return AnalyzeResponse(
            type=kind,
            answer=query_analyzer.answer(kind, context),
            source="fallback",
        )

    def status(self) -> AssistantStatus:
        return AssistantStatus(
            backend_available=self.backend.is_available(),
            backend_config=self.backend.config_info(),
            fallback_enabled=True,
            cached_contexts=len(self.cache),
            active_sessions=self.conversations.session_count(),
            knowledge_chunks=self.retriever.chunk_count() if self.retriever is not None else 0,
        )

    def _prompt(self, query: str, context: BusinessContext, window: List[ChatExchange]) -> str:
        return build_prompt(
            query,
            context,
            window,
            self._find_snippet(query),
            max_history=self.settings.chat_history_window,
            message_max_chars=self.settings.prompt_message_max_chars,
            snippet_max_chars=self.settings.prompt_snippet_max_chars,
        )

    def _find_snippet(self, user_query: str) -> Optional[str]:
        if self.retriever is None:
            return None
        try:
            return self.retriever.find_snippet(user_query)
        except Exception as exc:
            logger.warning("Knowledge lookup failed: %s", exc)
            return None

    def _generate(self, prompt: str) -> Union[str, BackendFailure]:
        try:
            return self.backend.generate(prompt, timeout=self.settings.openai_timeout_seconds)
        except Exception as exc:
            logger.warning("Generative backend raised %s", exc.__class__.__name__)
            return BackendFailure(kind="unavailable", detail=str(exc))
