from __future__ import annotations

import asyncio
import dataclasses
import uuid
from typing import Dict, Iterable, List, Optional

from ...domain.entities import Session
from ...domain.ports import SessionStore


class InMemorySessionStore(SessionStore):
    """
    Dict-backed SessionStore for tests and local development.

    Writes go through an asyncio lock; reads return the stored (frozen)
    session objects directly.
    """

    def __init__(self, sessions: Optional[Iterable[Session]] = None) -> None:
        self._sessions: Dict[uuid.UUID, Session] = {s.id: s for s in sessions or ()}
        self._lock = asyncio.Lock()

    async def get_session_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        return self._sessions.get(session_id)

    async def create_session(self, session: Session) -> None:
        async with self._lock:
            if session.id in self._sessions:
                raise ValueError(f"session {session.id} already exists")
            self._sessions[session.id] = session

    async def block_session(self, session_id: uuid.UUID) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_blocked:
                return False
            self._sessions[session_id] = dataclasses.replace(session, is_blocked=True)
            return True

    # ---- helpers outside the port -----------------------------------------

    async def replace_session(self, session: Session) -> None:
        """Overwrite a stored session, e.g. to shorten its expiry administratively."""
        async with self._lock:
            self._sessions[session.id] = session

    def sessions_for(self, subject: str) -> List[Session]:
        return [s for s in self._sessions.values() if s.subject == subject]

    def __len__(self) -> int:
        return len(self._sessions)
