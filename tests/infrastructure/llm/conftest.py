"""Common fixtures for LLM infrastructure tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from lumen.config import LLMConfig
from lumen.infrastructure.llm.retry import RetryPolicy


@pytest.fixture
def llm_config() -> LLMConfig:
    """Create LLM config."""
    return LLMConfig(model="gpt-4o", temperature=0.7, max_tokens=1000)


@pytest.fixture
def no_wait_retry_policy() -> RetryPolicy:
    """Retry policy whose sleeps return immediately."""
    return RetryPolicy(max_retries=3, base_delay=1.0, sleep=AsyncMock())


@pytest.fixture
def make_response() -> Callable[[str | None], MagicMock]:
    """Build a mock LiteLLM response with the given message content."""

    def _make(content: str | None) -> MagicMock:
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        return response

    return _make


class FakeCompletionClient:
    """Completion client returning queued outputs and recording calls.

    Each queued item is either an output model instance or an exception
    to raise. ``forbidden`` lists output models whose request fails the
    test.
    """

    def __init__(
        self,
        outputs: list[Any] | None = None,
        forbidden: tuple[type[BaseModel], ...] = (),
    ) -> None:
        self.outputs = list(outputs or [])
        self.forbidden = forbidden
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        prompt: str,
        output_model: type[BaseModel],
        *,
        context: Any = None,
        temperature: float | None = None,
    ) -> Any:
        if output_model in self.forbidden:
            pytest.fail(f"{output_model.__name__} must not be requested")
        self.calls.append(
            {
                "prompt": prompt,
                "output_model": output_model,
                "context": context,
                "temperature": temperature,
            }
        )
        if not self.outputs:
            pytest.fail("No queued completion output")
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeCompletionClient]:
    return FakeCompletionClient
