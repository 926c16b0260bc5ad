"""Tests for InMemorySessionStore."""

import asyncio
from unittest.mock import MagicMock

import pytest

from lumen.application.services import MemoryManager
from lumen.infrastructure.persistence import InMemorySessionStore


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore(lambda: MemoryManager(MagicMock()))


class TestInMemorySessionStore:
    """InMemorySessionStore tests."""

    async def test_get_missing_returns_none(self, store: InMemorySessionStore) -> None:
        assert await store.get("unknown") is None

    async def test_create_and_get(self, store: InMemorySessionStore) -> None:
        session = await store.create("s1")

        assert session.session_id == "s1"
        assert await store.get("s1") is session

    async def test_get_or_create_reuses_session(
        self, store: InMemorySessionStore
    ) -> None:
        first = await store.get_or_create("s1")
        second = await store.get_or_create("s1")

        assert first is second

    async def test_sessions_own_separate_memory(
        self, store: InMemorySessionStore
    ) -> None:
        first = await store.get_or_create("s1")
        second = await store.get_or_create("s2")

        assert first.memory is not second.memory
        assert first.lock is not second.lock

    async def test_create_replaces_existing(self, store: InMemorySessionStore) -> None:
        original = await store.create("s1")
        replacement = await store.create("s1")

        assert replacement is not original
        assert await store.get("s1") is replacement

    async def test_delete(self, store: InMemorySessionStore) -> None:
        await store.create("s1")

        assert await store.delete("s1") is True
        assert await store.delete("s1") is False
        assert await store.get("s1") is None

    async def test_concurrent_get_or_create_yields_one_session(
        self, store: InMemorySessionStore
    ) -> None:
        sessions = await asyncio.gather(
            *(store.get_or_create("shared") for _ in range(10))
        )

        assert all(session is sessions[0] for session in sessions)
