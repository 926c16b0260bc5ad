"""Two-stage intent router.

A keyword fast path handles obvious requests without a classification
call. Everything else is classified by the model into the closed agent
set, then dispatched to that agent's schema.
"""

import logging
from typing import TYPE_CHECKING, Any

from lumen.domain.entities import AgentResponse, AgentType
from lumen.domain.exceptions import RoutingError
from lumen.infrastructure.llm.client import CompletionClient
from lumen.infrastructure.llm.models import AGENT_SCHEMAS, IntentClassificationOutput
from lumen.infrastructure.llm.templates import create_jinja_env

if TYPE_CHECKING:
    from lumen.application.services.memory_manager import MemoryManager

logger = logging.getLogger(__name__)

DISPATCH_TEMPERATURE = 0.6
CLASSIFICATION_TEMPERATURE = 0.3

# Checked in declaration order; the first agent with a matching phrase wins.
AGENT_KEYWORDS: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCAFFOLD: (
        "initialize",
        "scaffold",
        "create project",
        "setup project",
        "new project",
        "bootstrap",
    ),
    AgentType.FILE_OP: (
        "create file",
        "write file",
        "delete file",
        "update file",
        "move file",
        "rename file",
    ),
    AgentType.ANALYZE: (
        "analyze code",
        "review code",
        "check quality",
        "find bugs",
        "code review",
        "refactor",
    ),
    AgentType.TEST: (
        "generate tests",
        "write tests",
        "create tests",
        "test this",
        "unit test",
        "integration test",
    ),
    AgentType.DOCS: (
        "document",
        "generate docs",
        "create documentation",
        "explain this code",
    ),
}

AGENT_DESCRIPTIONS: dict[AgentType, str] = {
    AgentType.SCAFFOLD: (
        "For initializing new projects with templates, dependencies, "
        "and directory structures"
    ),
    AgentType.FILE_OP: "For file CRUD operations (create, read, update, delete)",
    AgentType.ANALYZE: (
        "For code quality review, bug detection, and refactoring suggestions"
    ),
    AgentType.TEST: "For generating unit tests, integration tests, and test data",
    AgentType.DOCS: "For creating documentation from code",
    AgentType.DEFAULT: (
        "For general conversation, questions, or tasks that don't fit "
        "other categories"
    ),
}


def match_keyword(user_input: str) -> AgentType | None:
    """Return the first agent whose trigger phrase occurs in the input."""
    lowered = user_input.lower()
    for agent, phrases in AGENT_KEYWORDS.items():
        if any(phrase in lowered for phrase in phrases):
            return agent
    return None


def resolve_agent(name: AgentType | str) -> AgentType:
    """Resolve a classifier answer, falling back to DEFAULT if unknown."""
    if isinstance(name, AgentType):
        return name
    try:
        return AgentType.from_name(name)
    except RoutingError as e:
        logger.warning("%s; falling back to default agent", e)
        return AgentType.DEFAULT


def available_agents() -> list[tuple[str, str]]:
    """Registered agents as (name, description) pairs."""
    return [(agent.value, AGENT_DESCRIPTIONS[agent]) for agent in AgentType]


class LLMIntentRouter:
    """Routes user input to a schema-constrained completion."""

    def __init__(self, client: CompletionClient) -> None:
        """Initialize the router.

        Args:
            client: Completion client for classification and dispatch.
        """
        self._client = client
        self._classification_template = create_jinja_env().get_template(
            "intent_classification.j2"
        )

    async def route(self, user_input: str, memory: "MemoryManager") -> AgentResponse:
        """Route a request and return the selected agent's structured output.

        Args:
            user_input: The user's request.
            memory: Session memory supplying hydrated context.

        Returns:
            Agent response carrying the validated payload.

        Raises:
            ProviderError: Both the routed call and the default retry failed.
        """
        context = memory.get_hydrated_context().to_dict()

        try:
            return await self._route(user_input, context)
        except Exception as e:
            logger.error(
                "Schema routing failed, falling back to default agent: %s", e
            )
            payload = await self._dispatch(user_input, AgentType.DEFAULT, context)
            return AgentResponse(agent=AgentType.DEFAULT, payload=payload, fallback=True)

    async def _route(self, user_input: str, context: dict[str, Any]) -> AgentResponse:
        agent = match_keyword(user_input)
        if agent is not None:
            logger.info("Quick match: %s agent (keyword detected)", agent.value)
            payload = await self._dispatch(user_input, agent, context)
            return AgentResponse(agent=agent, payload=payload)

        classification = await self.classify(user_input, context)
        agent = resolve_agent(classification.recommended_agent)
        logger.info(
            "AI classification: %s (%s confidence): %s",
            agent.value,
            classification.confidence,
            classification.reasoning,
        )
        payload = await self._dispatch(user_input, agent, context)
        return AgentResponse(
            agent=agent,
            payload=payload,
            classification_reasoning=classification.reasoning,
        )

    async def classify(
        self, user_input: str, context: dict[str, Any] | None = None
    ) -> IntentClassificationOutput:
        prompt = self._classification_template.render(
            user_input=user_input,
            agents=available_agents(),
        )
        return await self._client.complete(
            prompt,
            IntentClassificationOutput,
            context=context,
            temperature=CLASSIFICATION_TEMPERATURE,
        )

    async def _dispatch(
        self, user_input: str, agent: AgentType, context: dict[str, Any]
    ) -> Any:
        return await self._client.complete(
            user_input,
            AGENT_SCHEMAS[agent],
            context=context,
            temperature=DISPATCH_TEMPERATURE,
        )
