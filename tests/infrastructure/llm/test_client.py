"""Tests for CompletionClient."""

import json
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from litellm.exceptions import AuthenticationError, RateLimitError

from lumen.config import LLMConfig
from lumen.infrastructure.llm import (
    CompletionClient,
    ProviderAuthenticationError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderServerError,
    RetryPolicy,
)
from lumen.infrastructure.llm.models import SummarizeOutput

ACOMPLETION = "lumen.infrastructure.llm.client.litellm.acompletion"

VALID_SUMMARY = json.dumps({"summary": "short", "reasoning": "because"})


class ServerError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class TestCompletionClient:
    """CompletionClient tests."""

    @pytest.fixture
    def client(
        self, llm_config: LLMConfig, no_wait_retry_policy: RetryPolicy
    ) -> CompletionClient:
        return CompletionClient(llm_config, no_wait_retry_policy)

    async def test_complete_returns_validated_model(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(
            ACOMPLETION, new=AsyncMock(return_value=make_response(VALID_SUMMARY))
        ) as mock_completion:
            result = await client.complete("Summarize", SummarizeOutput)

        assert isinstance(result, SummarizeOutput)
        assert result.summary == "short"
        assert result.reasoning == "because"
        mock_completion.assert_awaited_once()

    async def test_complete_applies_config_and_schema(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(
            ACOMPLETION, new=AsyncMock(return_value=make_response(VALID_SUMMARY))
        ) as mock_completion:
            await client.complete("Summarize", SummarizeOutput)

        call_kwargs = mock_completion.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o"
        assert call_kwargs["temperature"] == 0.7
        assert call_kwargs["max_tokens"] == 1000
        assert call_kwargs["response_format"] is SummarizeOutput
        assert call_kwargs["messages"] == [{"role": "user", "content": "Summarize"}]

    async def test_temperature_override(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(
            ACOMPLETION, new=AsyncMock(return_value=make_response(VALID_SUMMARY))
        ) as mock_completion:
            await client.complete("Summarize", SummarizeOutput, temperature=0.3)

        assert mock_completion.call_args.kwargs["temperature"] == 0.3

    async def test_context_is_sent_as_separate_system_message(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        context = {"recentHistory": [{"role": "user", "text": "earlier"}]}

        with patch(
            ACOMPLETION, new=AsyncMock(return_value=make_response(VALID_SUMMARY))
        ) as mock_completion:
            await client.complete("What next?", SummarizeOutput, context=context)

        messages = mock_completion.call_args.kwargs["messages"]
        assert len(messages) == 2
        assert messages[0]["role"] == "system"
        assert "earlier" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "What next?"}

    async def test_schema_mismatch_raises_response_error(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(
            ACOMPLETION,
            new=AsyncMock(return_value=make_response('{"summary": "missing"}')),
        ) as mock_completion:
            with pytest.raises(ProviderResponseError):
                await client.complete("Summarize", SummarizeOutput)

        # Terminal errors are not retried
        assert mock_completion.await_count == 1

    async def test_empty_content_raises_response_error(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(ACOMPLETION, new=AsyncMock(return_value=make_response(None))):
            with pytest.raises(ProviderResponseError):
                await client.complete("Summarize", SummarizeOutput)

    async def test_authentication_error_is_not_retried(
        self, client: CompletionClient
    ) -> None:
        error = AuthenticationError(
            message="Invalid API key", llm_provider="openai", model="gpt-4o"
        )

        with patch(ACOMPLETION, new=AsyncMock(side_effect=error)) as mock_completion:
            with pytest.raises(ProviderAuthenticationError):
                await client.complete("Summarize", SummarizeOutput)

        assert mock_completion.await_count == 1

    async def test_rate_limit_is_retried_then_raised(
        self, client: CompletionClient, no_wait_retry_policy: RetryPolicy
    ) -> None:
        error = RateLimitError(
            message="Rate limit exceeded", llm_provider="openai", model="gpt-4o"
        )

        with patch(ACOMPLETION, new=AsyncMock(side_effect=error)) as mock_completion:
            with pytest.raises(ProviderRateLimitError):
                await client.complete("Summarize", SummarizeOutput)

        assert mock_completion.await_count == 4
        delays = [c.args[0] for c in no_wait_retry_policy.sleep.await_args_list]
        assert delays == [1.0, 2.0, 4.0]

    async def test_server_error_recovers_on_retry(
        self,
        client: CompletionClient,
        make_response: Callable[[str | None], MagicMock],
    ) -> None:
        with patch(
            ACOMPLETION,
            new=AsyncMock(
                side_effect=[ServerError(503), make_response(VALID_SUMMARY)]
            ),
        ) as mock_completion:
            result = await client.complete("Summarize", SummarizeOutput)

        assert result.summary == "short"
        assert mock_completion.await_count == 2

    async def test_persistent_server_error(self, client: CompletionClient) -> None:
        with patch(ACOMPLETION, new=AsyncMock(side_effect=ServerError(500))):
            with pytest.raises(ProviderServerError):
                await client.complete("Summarize", SummarizeOutput)
