"""Session repository protocol."""

from typing import Protocol

from lumen.domain.entities.session import Session


class SessionRepository(Protocol):
    """Stores conversation sessions by id."""

    async def get(self, session_id: str) -> Session | None:
        """Return the session, or None if it does not exist."""
        ...

    async def create(self, session_id: str) -> Session:
        """Create a fresh session, replacing any existing one with the same id."""
        ...

    async def get_or_create(self, session_id: str) -> Session:
        ...

    async def delete(self, session_id: str) -> bool:
        """Delete a session.

        Returns:
            True if a session was deleted.
        """
        ...
