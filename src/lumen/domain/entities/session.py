"""Conversation session entity."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lumen.application.services.memory_manager import MemoryManager


@dataclass
class Session:
    """A conversation session.

    The session exclusively owns its memory. ``lock`` serializes whole
    turns so that no two operations mutate the same memory concurrently.

    Attributes:
        session_id: Caller-chosen identifier.
        memory: Rolling memory of this session.
        lock: Per-session turn lock.
        created_at: Creation time.
    """

    session_id: str
    memory: "MemoryManager"
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
