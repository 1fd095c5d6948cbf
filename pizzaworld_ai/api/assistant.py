from __future__ import annotations

from typing import Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from pizzaworld_ai.api.dependencies import get_assistant_service, get_role_scope
from pizzaworld_ai.core.errors import NotFoundError
from pizzaworld_ai.models.scope import RoleScope
from pizzaworld_ai.schemas.assistant import (
    AnalyzeRequest,
    AnalyzeResponse,
    AssistantStatus,
    ChatExchangeItem,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    InsightsResponse,
)
from pizzaworld_ai.services.assistant_service import AssistantService
from pizzaworld_ai.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/assistant", tags=["assistant"])


def _scope_label(scope: RoleScope) -> str:
    if scope.scope_id:
        return f"{scope.role}|{scope.scope_id}"
    return scope.role


def _word_events(answer: str) -> Iterator[str]:
    # One SSE message per whitespace-delimited word, then a done marker.
    for word in answer.split():
        yield f"event: message\ndata: {word}\n\n"
    yield "event: done\ndata: [DONE]\n\n"


@router.post("/chat")
def assistant_chat(
    request: ChatRequest,
    scope: RoleScope = Depends(get_role_scope),
    service: AssistantService = Depends(get_assistant_service),
) -> ResponseEnvelope[ChatResponse]:
    reply = service.chat(request.session_id, request.message, scope)
    data = ChatResponse(
        session_id=reply.session_id,
        message=reply.answer,
        category=reply.category,
        source=reply.source,
        timestamp=reply.timestamp,
        fallback_reason=reply.fallback_reason,
    )
    meta = build_meta(
        "assistant",
        scope=_scope_label(scope),
        category=reply.category,
        degraded=reply.source == "fallback",
    )
    return ResponseEnvelope(data=data, meta=meta)


@router.post("/chat/stream")
def assistant_chat_stream(
    request: ChatRequest,
    scope: RoleScope = Depends(get_role_scope),
    service: AssistantService = Depends(get_assistant_service),
) -> StreamingResponse:
    reply = service.chat(request.session_id, request.message, scope)
    return StreamingResponse(
        _word_events(reply.answer),
        media_type="text/event-stream",
        headers={"X-Session-Id": reply.session_id, "Cache-Control": "no-cache"},
    )


@router.get("/chat/history/{session_id}")
def assistant_chat_history(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> ResponseEnvelope[ChatHistoryResponse]:
    exchanges = service.history(session_id)
    if not exchanges:
        raise NotFoundError(f"No chat history for session {session_id}")
    data = ChatHistoryResponse(
        session_id=session_id,
        messages=[
            ChatExchangeItem(
                author=exchange.author,
                text=exchange.text,
                category=exchange.category,
                timestamp=exchange.timestamp,
            )
            for exchange in exchanges
        ],
    )
    return ResponseEnvelope(data=data, meta=build_meta("conversation_history"))


@router.get("/insights")
def assistant_insights(
    scope: RoleScope = Depends(get_role_scope),
    service: AssistantService = Depends(get_assistant_service),
) -> ResponseEnvelope[InsightsResponse]:
    data = InsightsResponse(role=scope.role, scope=scope.label, insights=service.insights(scope))
    meta = build_meta("business_context", scope=_scope_label(scope), category="analytics")
    return ResponseEnvelope(data=data, meta=meta)


@router.post("/analyze")
def assistant_analyze(
    request: AnalyzeRequest,
    scope: RoleScope = Depends(get_role_scope),
    service: AssistantService = Depends(get_assistant_service),
) -> ResponseEnvelope[AnalyzeResponse]:
    data = service.analyze(request.query, scope)
    meta = build_meta(
        "assistant",
        scope=_scope_label(scope),
        category="analytics",
        degraded=data.source == "fallback",
    )
    return ResponseEnvelope(data=data, meta=meta)


@router.get("/status")
def assistant_status(
    service: AssistantService = Depends(get_assistant_service),
) -> ResponseEnvelope[AssistantStatus]:
    return ResponseEnvelope(data=service.status(), meta=build_meta("system"))
