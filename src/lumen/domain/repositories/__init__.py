"""Repository protocols."""

from lumen.domain.repositories.session_repository import SessionRepository

__all__ = ["SessionRepository"]
