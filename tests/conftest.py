from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient
from fakes import FakeBackend, FakeMetricsProvider, FakeRetriever

from pizzaworld_ai.api.dependencies import get_assistant_service
from pizzaworld_ai.core.config import Settings
from pizzaworld_ai.main import create_app
from pizzaworld_ai.services.assistant_service import AssistantService
from pizzaworld_ai.services.context_cache import ContextCache
from pizzaworld_ai.services.conversation_history import ConversationHistory


@pytest.fixture()
def settings() -> Settings:
    return Settings(OPENAI_API_KEY="test-key", SUPABASE_URL=None, _env_file=None)


@pytest.fixture()
def provider() -> FakeMetricsProvider:
    return FakeMetricsProvider()


@pytest.fixture()
def make_service(settings: Settings, provider: FakeMetricsProvider):
    def factory(
        backend: Optional[FakeBackend] = None,
        retriever: Optional[FakeRetriever] = None,
        metrics: Optional[FakeMetricsProvider] = None,
    ) -> AssistantService:
        return AssistantService(
            provider=metrics or provider,
            backend=backend or FakeBackend(),
            cache=ContextCache(),
            history=ConversationHistory(capacity=settings.chat_history_cap),
            retriever=retriever,
            settings=settings,
        )

    return factory


@pytest.fixture()
def client(make_service) -> TestClient:
    service = make_service()
    app = create_app()
    app.dependency_overrides[get_assistant_service] = lambda: service
    return TestClient(app)
