from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import Field, StringConstraints

from pizzaworld_ai.shared.response import BaseSchema

MessageText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=4000)]
InsightPriority = Literal["low", "medium", "high"]
AnalysisType = Literal["ai_analysis", "revenue", "customer", "store", "product", "general"]


class ChatRequest(BaseSchema):
    message: MessageText
    session_id: Optional[str] = None


class ChatResponse(BaseSchema):
    session_id: str
    message: str
    category: str
    source: Literal["generated", "fallback"]
    timestamp: datetime
    fallback_reason: Optional[str] = None


class ChatExchangeItem(BaseSchema):
    author: Literal["user", "assistant"]
    text: str
    category: str
    timestamp: datetime


class ChatHistoryResponse(BaseSchema):
    session_id: str
    messages: List[ChatExchangeItem] = Field(default_factory=list)


class InsightEvidence(BaseSchema):
    metric: str
    value: str


class InsightRecord(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    insight_type: str
    title: str
    description: str
    category: str
    target_entity: str
    target_entity_id: Optional[str] = None
    confidence: float = Field(ge=0, le=1)
    priority: InsightPriority
    recommendation: str
    is_actionable: bool = True
    evidence: List[InsightEvidence] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class InsightsResponse(BaseSchema):
    role: str
    scope: str
    insights: List[InsightRecord] = Field(default_factory=list)


class AnalyzeRequest(BaseSchema):
    query: MessageText


class AnalyzeResponse(BaseSchema):
    type: AnalysisType
    answer: str
    source: Literal["generated", "fallback"]


class AssistantStatus(BaseSchema):
    backend_available: bool
    backend_config: Dict[str, Any] = Field(default_factory=dict)
    fallback_enabled: bool = True
    cached_contexts: int = 0
    active_sessions: int = 0
    knowledge_chunks: int = 0
