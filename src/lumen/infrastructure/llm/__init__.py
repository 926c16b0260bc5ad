"""LLM infrastructure."""

from lumen.infrastructure.llm.client import CompletionClient
from lumen.infrastructure.llm.exceptions import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderServerError,
)
from lumen.infrastructure.llm.intent_router import LLMIntentRouter
from lumen.infrastructure.llm.memory_summarizer import LLMConversationSummarizer
from lumen.infrastructure.llm.retry import RetryOutcome, RetryPolicy
from lumen.infrastructure.llm.war_room import LLMWarRoom

__all__ = [
    "CompletionClient",
    "LLMConversationSummarizer",
    "LLMIntentRouter",
    "LLMWarRoom",
    "ProviderAuthenticationError",
    "ProviderError",
    "ProviderRateLimitError",
    "ProviderResponseError",
    "ProviderServerError",
    "RetryOutcome",
    "RetryPolicy",
]
