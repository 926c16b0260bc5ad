"""In-process session store."""

import asyncio
import logging
from collections.abc import Callable

from lumen.application.services.memory_manager import MemoryManager
from lumen.domain.entities import Session

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Keeps sessions in a dict for the lifetime of the process.

    Each session gets its own memory from ``memory_factory``, so no
    memory instance is shared between sessions.
    """

    def __init__(self, memory_factory: Callable[[], MemoryManager]) -> None:
        """Initialize the store.

        Args:
            memory_factory: Builds a fresh memory for each new session.
        """
        self._memory_factory = memory_factory
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def create(self, session_id: str) -> Session:
        async with self._lock:
            return self._create(session_id)

    async def get_or_create(self, session_id: str) -> Session:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._create(session_id)
            return session

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            deleted = self._sessions.pop(session_id, None) is not None
        if deleted:
            logger.info("Deleted session %s", session_id)
        return deleted

    def _create(self, session_id: str) -> Session:
        session = Session(session_id=session_id, memory=self._memory_factory())
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session
