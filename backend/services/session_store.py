from __future__ import annotations

import asyncio
import logging

from models.session import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Process-wide registry of voting sessions, keyed by the caller-chosen id.

    - Sessions are created lazily on first reference and never evicted.
    - The registry lock is held only for the insert-if-absent; each Session
      carries its own lock for everything else.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sessions: dict[str, Session] = {}

    async def get_or_create(self, session_id: str) -> Session:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(id=session_id)
                self._sessions[session_id] = session
                logger.info("[session_store] Created session_id=%r", session_id)
            return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


session_store = SessionStore()


def get_session_store() -> SessionStore:
    return session_store
