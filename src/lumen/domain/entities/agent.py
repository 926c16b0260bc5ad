"""Agent registry entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from lumen.domain.exceptions import RoutingError


class AgentType(Enum):
    """Closed set of specialized agents.

    DEFAULT is the catch-all conversational agent and the fallback for
    every routing failure.
    """

    SCAFFOLD = "scaffold"
    FILE_OP = "fileOp"
    ANALYZE = "analyze"
    TEST = "test"
    DOCS = "docs"
    DEFAULT = "default"

    @classmethod
    def from_name(cls, name: str) -> "AgentType":
        """Resolve a wire name to an agent.

        Raises:
            RoutingError: The name is not a registered agent.
        """
        try:
            return cls(name)
        except ValueError as e:
            raise RoutingError(name) from e


class ResponseChoice(Enum):
    """Branch selected by the default agent."""

    CONVERSATIONAL = "conversational"
    CODE = "code"
    TERMINAL_COMMAND = "terminalCommand"


@dataclass(frozen=True)
class AgentResponse:
    """A routed model response.

    Attributes:
        agent: Agent whose schema produced the payload.
        payload: Schema-validated model output, passed through unmodified.
        classification_reasoning: Why the classifier picked the agent, when
            the classifier was consulted.
        fallback: True when the payload came from the default-agent retry.
    """

    agent: AgentType
    payload: Any
    classification_reasoning: str | None = None
    fallback: bool = False
