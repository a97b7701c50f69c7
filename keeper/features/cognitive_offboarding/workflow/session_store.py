"""
In-memory registry of workflow sessions.

Insert and lookup are guarded by a thread lock so the registry can be read
from sync route handlers. Each session also gets an asyncio lock that the
orchestrator holds for the length of a phase.
"""

import asyncio
import threading

from keeper.features.cognitive_offboarding.domain.session_models import WorkflowSession


class InMemorySessionStore:
    def __init__(self):
        self._sessions: dict[str, WorkflowSession] = {}
        self._phase_locks: dict[str, asyncio.Lock] = {}
        self._lock = threading.Lock()

    def add(self, session: WorkflowSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session
            self._phase_locks.setdefault(session.session_id, asyncio.Lock())

    def get(self, session_id: str) -> WorkflowSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def all(self) -> list[WorkflowSession]:
        with self._lock:
            return list(self._sessions.values())

    def lock_for(self, session_id: str) -> asyncio.Lock:
        with self._lock:
            return self._phase_locks.setdefault(session_id, asyncio.Lock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
