from __future__ import annotations

from typing import Protocol

from .models import ConversationSession


class SessionStore(Protocol):
    def get(self, session_id: str) -> ConversationSession | None: ...

    def put(self, session: ConversationSession) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local sessions; lost on restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}

    def get(self, session_id: str) -> ConversationSession | None:
        session = self._sessions.get(session_id)
        # hand out copies so a failed turn never leaves half-applied state
        return session.model_copy(deep=True) if session else None

    def put(self, session: ConversationSession) -> None:
        self._sessions[session.session_id] = session.model_copy(deep=True)

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
