from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header

from pizzaworld_ai.core.config import get_critical_categories, get_knowledge_paths, get_settings
from pizzaworld_ai.models.scope import RoleScope, parse_role_scope
from pizzaworld_ai.repositories.metrics_repository import MetricsRepository
from pizzaworld_ai.services.assistant_service import AssistantService
from pizzaworld_ai.services.context_cache import ContextCache
from pizzaworld_ai.services.conversation_history import ConversationHistory
from pizzaworld_ai.services.generative_backend import OpenAiTextBackend
from pizzaworld_ai.services.knowledge_retriever import StaticDocRetriever


@lru_cache
def get_metrics_repository() -> MetricsRepository:
    return MetricsRepository()


@lru_cache
def get_generative_backend() -> OpenAiTextBackend:
    return OpenAiTextBackend()


@lru_cache
def get_knowledge_retriever() -> StaticDocRetriever:
    return StaticDocRetriever(get_knowledge_paths())


@lru_cache
def get_context_cache() -> ContextCache:
    settings = get_settings()
    return ContextCache(
        critical_ttl_seconds=settings.context_critical_ttl_seconds,
        standard_ttl_seconds=settings.context_standard_ttl_seconds,
        critical_categories=get_critical_categories(),
        sweep_threshold=settings.context_sweep_threshold,
        sweep_probability=settings.context_sweep_probability,
    )


@lru_cache
def get_conversation_history() -> ConversationHistory:
    return ConversationHistory(capacity=get_settings().chat_history_cap)


def get_assistant_service() -> AssistantService:
    return AssistantService(
        provider=get_metrics_repository(),
        backend=get_generative_backend(),
        cache=get_context_cache(),
        history=get_conversation_history(),
        retriever=get_knowledge_retriever(),
    )


def get_role_scope(
    x_user_role: str = Header(...),
    x_state_abbr: Optional[str] = Header(default=None),
    x_store_id: Optional[str] = Header(default=None),
) -> RoleScope:
    return parse_role_scope(x_user_role, state_abbr=x_state_abbr, store_id=x_store_id)
