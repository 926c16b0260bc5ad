"""Session persistence."""

from lumen.infrastructure.persistence.session_store import InMemorySessionStore

__all__ = ["InMemorySessionStore"]
