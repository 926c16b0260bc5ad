"""LLM-based conversation summarizer."""

from collections.abc import Sequence

from lumen.domain.entities import Interaction, SummarizationResult
from lumen.infrastructure.llm.client import CompletionClient
from lumen.infrastructure.llm.models import SummarizeOutput
from lumen.infrastructure.llm.templates import create_jinja_env

SUMMARY_TEMPERATURE = 0.5


class LLMConversationSummarizer:
    """Summarizes a window of interactions with a structured completion."""

    def __init__(self, client: CompletionClient) -> None:
        """Initialize the summarizer.

        Args:
            client: Completion client used for summarization.
        """
        self._client = client
        self._template = create_jinja_env().get_template("summarize_query.j2")

    async def summarize(self, interactions: Sequence[Interaction]) -> SummarizationResult:
        """Summarize interactions.

        Args:
            interactions: Interactions in window order (oldest first).

        Returns:
            Summary text and the model's reasoning.

        Raises:
            ProviderError: The completion call failed.
        """
        prompt = self.build_prompt(interactions)
        output = await self._client.complete(
            prompt,
            SummarizeOutput,
            temperature=SUMMARY_TEMPERATURE,
        )
        return SummarizationResult(text=output.summary, reasoning=output.reasoning)

    def build_prompt(self, interactions: Sequence[Interaction]) -> str:
        return self._template.render(interactions=interactions)
