from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Deque, Dict, List

from pizzaworld_ai.models.assistant import ChatExchange


class ConversationHistory:
    """Bounded, in-memory chat log per session. Nothing here is persisted."""

    def __init__(self, capacity: int = 20) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._sessions: Dict[str, Deque[ChatExchange]] = {}
        self._lock = Lock()

    def append(self, session_id: str, exchange: ChatExchange) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = deque(maxlen=self.capacity)
                self._sessions[session_id] = session
            session.append(exchange)

    def window(self, session_id: str, max_messages: int) -> List[ChatExchange]:
        if max_messages <= 0:
            return []
        with self._lock:
            session = self._sessions.get(session_id)
            if not session:
                return []
            return list(session)[-max_messages:]

    def history(self, session_id: str) -> List[ChatExchange]:
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)
