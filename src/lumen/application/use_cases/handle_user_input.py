"""Handle user input use case."""

import json
import logging
from dataclasses import dataclass, field

from lumen.application.services.memory_manager import MemoryManager
from lumen.config import ConversationConfig
from lumen.domain.entities import (
    AgentResponse,
    CommandProposal,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStatus,
    ResponseChoice,
    Role,
)
from lumen.domain.exceptions import ValidationError
from lumen.domain.repositories import SessionRepository
from lumen.domain.services import CommandRunner, IntentRouter
from lumen.infrastructure.llm.models import BaseAgentOutput

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Everything that happened during one user turn.

    Attributes:
        responses: Routed responses, one per chain step.
        executions: Results of the commands run during the turn.
        pending_approval: Proposal waiting for approval, if the chain
            stopped at the approval gate.
        missing_context: What the agent asked for, if it stopped there.
        steps: Chain steps taken.
        hit_step_limit: True when the chain was cut off at the step limit.
    """

    responses: list[AgentResponse] = field(default_factory=list)
    executions: list[ExecutionResult] = field(default_factory=list)
    pending_approval: CommandProposal | None = None
    missing_context: list[str] = field(default_factory=list)
    steps: int = 0
    hit_step_limit: bool = False

    @property
    def final_response(self) -> AgentResponse | None:
        return self.responses[-1] if self.responses else None


class HandleUserInputUseCase:
    """Runs one conversational turn: route, act, feed back, maybe chain.

    Each step records the input in memory, routes it, and acts on the
    payload. A terminal command is executed and its outcome becomes the
    next step's input. The chain continues while the agent sets
    ``continue`` and stops after ``max_chain_steps``.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        router: IntentRouter,
        command_runner: CommandRunner,
        config: ConversationConfig | None = None,
    ) -> None:
        """Initialize the use case.

        Args:
            session_repository: Session lookup.
            router: Intent router.
            command_runner: Executes proposed terminal commands.
            config: Chain limits.
        """
        self._session_repository = session_repository
        self._router = router
        self._command_runner = command_runner
        self._config = config or ConversationConfig()

    async def execute(
        self, session_id: str, user_input: str, auto_approve: bool = False
    ) -> TurnResult:
        """Execute the use case.

        The whole turn holds the session lock, so concurrent turns on one
        session run one after the other.

        Args:
            session_id: Session to run the turn in (created if missing).
            user_input: The user's message.
            auto_approve: Run commands that require approval without stopping.

        Returns:
            The turn result.

        Raises:
            Exception: Any step failure, after it is recorded in memory.
        """
        session = await self._session_repository.get_or_create(session_id)
        async with session.lock:
            result = TurnResult()
            try:
                await self._run_chain(session.memory, user_input, auto_approve, result)
            except Exception as e:
                logger.error("Turn failed in session %s: %s", session_id, e)
                await session.memory.add_interaction(
                    Role.SYSTEM, f"Error occurred: {e}"
                )
                raise
            return result

    async def _run_chain(
        self,
        memory: MemoryManager,
        user_input: str,
        auto_approve: bool,
        result: TurnResult,
    ) -> None:
        current_input = user_input
        while result.steps < self._config.max_chain_steps:
            result.steps += 1

            # 1. Record the input
            await memory.add_interaction(Role.USER, current_input)

            # 2. Route
            response = await self._router.route(current_input, memory)
            result.responses.append(response)
            payload = response.payload

            # Specialized agents return a descriptor and end the chain
            if not isinstance(payload, BaseAgentOutput):
                await memory.add_interaction(
                    Role.ASSISTANT,
                    json.dumps(
                        payload.to_wire(), ensure_ascii=False, separators=(",", ":")
                    ),
                )
                return

            # 3. Context gate
            if payload.missing_context:
                result.missing_context = list(payload.missing_context)
                await memory.add_interaction(
                    Role.ASSISTANT,
                    payload.response
                    or f"Missing: {', '.join(payload.missing_context)}",
                )
                return

            # 4. Act on the chosen branch
            if payload.choice == ResponseChoice.TERMINAL_COMMAND:
                proposal = CommandProposal(
                    command=payload.terminal_command or "",
                    reasoning=payload.command_reasoning or "",
                    requires_approval=bool(payload.requires_approval),
                )
                try:
                    execution = await self._command_runner.execute(
                        proposal, ExecutionOptions(auto_approve=auto_approve)
                    )
                except ValidationError as e:
                    logger.warning("Rejected command proposal: %s", e)
                    execution = ExecutionResult(
                        command=proposal.command,
                        status=ExecutionStatus.ERROR,
                        message=str(e),
                    )
                if execution.status == ExecutionStatus.APPROVAL_REQUIRED:
                    result.pending_approval = proposal
                    return

                result.executions.append(execution)
                await memory.add_interaction(
                    Role.SYSTEM,
                    execution.feedback_text()[: self._config.feedback_limit],
                )
                current_input = _follow_up_prompt(execution)
            elif payload.choice == ResponseChoice.CODE:
                await memory.add_interaction(
                    Role.ASSISTANT,
                    f"Generated {payload.language} code: {payload.code_explanation}",
                )
            else:
                await memory.add_interaction(Role.ASSISTANT, payload.response or "")

            # 5. Continuity check
            if not payload.continue_:
                return
            logger.info("Agent is continuing to the next step")

        result.hit_step_limit = True
        logger.warning(
            "Reached maximum of %d chain steps, stopping",
            self._config.max_chain_steps,
        )


def _follow_up_prompt(execution: ExecutionResult) -> str:
    if execution.ok:
        return f"The command {execution.status.value}. What is the next step?"
    return f"The command {execution.status.value}. How should we handle this?"
