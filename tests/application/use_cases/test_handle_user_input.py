"""Tests for HandleUserInputUseCase."""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lumen.application.services import MemoryManager
from lumen.application.use_cases import HandleUserInputUseCase
from lumen.config import ConversationConfig
from lumen.domain.entities import (
    AgentResponse,
    AgentType,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStatus,
    ResponseChoice,
    Role,
)
from lumen.domain.services import CommandRunner
from lumen.infrastructure.llm import ProviderServerError
from lumen.infrastructure.llm.models import (
    BaseAgentOutput,
    FileOperationOutput,
    SafetyChecks,
)
from lumen.infrastructure.persistence import InMemorySessionStore
from lumen.infrastructure.shell import CommandExecutor


def base_output(**overrides: Any) -> BaseAgentOutput:
    fields: dict[str, Any] = {
        "choice": ResponseChoice.CONVERSATIONAL,
        "response": "Sure.",
        "continue_": False,
        "missing_context": [],
        "questions_for_user": False,
    }
    fields.update(overrides)
    return BaseAgentOutput(**fields)


def default_response(**overrides: Any) -> AgentResponse:
    return AgentResponse(agent=AgentType.DEFAULT, payload=base_output(**overrides))


class FakeRouter:
    """Returns queued responses and records the inputs it was given."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.inputs: list[str] = []

    async def route(self, user_input: str, memory: MemoryManager) -> AgentResponse:
        self.inputs.append(user_input)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore(lambda: MemoryManager(MagicMock(), window_size=50))


@pytest.fixture
def runner() -> AsyncMock:
    runner = AsyncMock()
    runner.execute.return_value = ExecutionResult(
        command="ls", status=ExecutionStatus.SUCCESS, exit_code=0, stdout="a.txt\n"
    )
    return runner


def make_use_case(
    store: InMemorySessionStore,
    router: FakeRouter,
    runner: CommandRunner,
    config: ConversationConfig | None = None,
) -> HandleUserInputUseCase:
    return HandleUserInputUseCase(
        session_repository=store,
        router=router,
        command_runner=runner,
        config=config,
    )


async def texts(
    store: InMemorySessionStore, session_id: str = "s1"
) -> list[tuple[Role, str]]:
    session = await store.get(session_id)
    assert session is not None
    return [(i.role, i.text) for i in session.memory.interactions]


class TestConversationalTurn:
    """Single-step turns."""

    async def test_conversational_reply_is_stored(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter([default_response(response="Hello!")])
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "hi")

        assert result.steps == 1
        assert result.final_response is not None
        assert result.final_response.payload.response == "Hello!"
        assert await texts(store) == [(Role.USER, "hi"), (Role.ASSISTANT, "Hello!")]
        runner.execute.assert_not_awaited()

    async def test_code_reply_is_summarized(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.CODE,
                    response=None,
                    code="print('hi')",
                    language="python",
                    code_explanation="prints a greeting",
                )
            ]
        )
        use_case = make_use_case(store, router, runner)

        await use_case.execute("s1", "write hello world")

        assert (await texts(store))[-1] == (
            Role.ASSISTANT,
            "Generated python code: prints a greeting",
        )

    async def test_missing_context_stops_chain(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    response=None,
                    continue_=True,
                    missing_context=["target directory", "language"],
                )
            ]
        )
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "set it up")

        assert result.steps == 1
        assert result.missing_context == ["target directory", "language"]
        assert (await texts(store))[-1] == (
            Role.ASSISTANT,
            "Missing: target directory, language",
        )

    async def test_specialized_payload_is_stored_as_json(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        payload = FileOperationOutput(
            operation="create",
            file_path="notes.txt",
            data="hello",
            safety_checks=SafetyChecks(check_existence=True, check_permissions=True),
            rollback=True,
        )
        router = FakeRouter([AgentResponse(agent=AgentType.FILE_OP, payload=payload)])
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "create file notes.txt")

        assert result.steps == 1
        role, text = (await texts(store))[-1]
        assert role == Role.ASSISTANT
        assert json.loads(text)["filePath"] == "notes.txt"


class TestCommandChain:
    """Terminal command steps."""

    async def test_command_feedback_and_follow_up(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    response=None,
                    terminal_command="ls",
                    command_reasoning="list files",
                    continue_=True,
                ),
                default_response(response="There is one file."),
            ]
        )
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "what files are here?")

        assert result.steps == 2
        assert len(result.executions) == 1
        assert router.inputs == [
            "what files are here?",
            "The command success. What is the next step?",
        ]
        proposal, options = runner.execute.await_args.args
        assert proposal.command == "ls"
        assert proposal.reasoning == "list files"
        assert options == ExecutionOptions(auto_approve=False)
        assert await texts(store) == [
            (Role.USER, "what files are here?"),
            (Role.SYSTEM, "Command success. a.txt"),
            (Role.USER, "The command success. What is the next step?"),
            (Role.ASSISTANT, "There is one file."),
        ]

    async def test_failed_command_asks_how_to_handle(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        runner.execute.return_value = ExecutionResult(
            command="make", status=ExecutionStatus.ERROR, exit_code=2, stderr="no rule"
        )
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    terminal_command="make",
                    continue_=True,
                ),
                default_response(response="Add a Makefile."),
            ]
        )
        use_case = make_use_case(store, router, runner)

        await use_case.execute("s1", "build it")

        assert router.inputs[1] == "The command error. How should we handle this?"

    async def test_command_without_continue_stops(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    terminal_command="ls",
                    continue_=False,
                )
            ]
        )
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "list")

        assert result.steps == 1
        assert len(result.executions) == 1

    async def test_feedback_is_truncated(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        runner.execute.return_value = ExecutionResult(
            command="cat big",
            status=ExecutionStatus.SUCCESS,
            exit_code=0,
            stdout="x" * 2000,
        )
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND, terminal_command="cat big"
                )
            ]
        )
        use_case = make_use_case(
            store, router, runner, ConversationConfig(feedback_limit=50)
        )

        await use_case.execute("s1", "show it")

        role, text = (await texts(store))[-1]
        assert role == Role.SYSTEM
        assert len(text) == 50

    async def test_approval_required_stops_with_pending_proposal(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        runner.execute.return_value = ExecutionResult(
            command="rm -rf ./build", status=ExecutionStatus.APPROVAL_REQUIRED
        )
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    terminal_command="rm -rf ./build",
                    requires_approval=True,
                    continue_=True,
                )
            ]
        )
        use_case = make_use_case(store, router, runner)

        result = await use_case.execute("s1", "clean up")

        assert result.pending_approval is not None
        assert result.pending_approval.command == "rm -rf ./build"
        assert result.pending_approval.requires_approval is True
        assert result.executions == []
        assert result.steps == 1

    async def test_auto_approve_is_passed_to_runner(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    terminal_command="ls",
                    requires_approval=True,
                )
            ]
        )
        use_case = make_use_case(store, router, runner)

        await use_case.execute("s1", "list", auto_approve=True)

        _, options = runner.execute.await_args.args
        assert options.auto_approve is True

    async def test_chain_stops_at_step_limit(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter(
            [default_response(continue_=True, response=f"step {i}") for i in range(5)]
        )
        use_case = make_use_case(
            store, router, runner, ConversationConfig(max_chain_steps=3)
        )

        result = await use_case.execute("s1", "go")

        assert result.steps == 3
        assert result.hit_step_limit is True
        assert len(router.inputs) == 3

    async def test_empty_command_is_fed_back_as_error(
        self, store: InMemorySessionStore
    ) -> None:
        router = FakeRouter(
            [
                default_response(
                    choice=ResponseChoice.TERMINAL_COMMAND,
                    response=None,
                    terminal_command=None,
                    continue_=True,
                ),
                default_response(response="Which command should I run?"),
            ]
        )
        use_case = make_use_case(store, router, CommandExecutor(AsyncMock()))

        result = await use_case.execute("s1", "run it")

        assert result.steps == 2
        assert result.executions[0].status == ExecutionStatus.ERROR
        assert router.inputs[1] == "The command error. How should we handle this?"
        assert (Role.SYSTEM, "Command error. Command must be a non-empty string") in (
            await texts(store)
        )


class TestErrors:
    """Failure handling."""

    async def test_error_is_recorded_and_reraised(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        router = FakeRouter([ProviderServerError("service unavailable")])
        use_case = make_use_case(store, router, runner)

        with pytest.raises(ProviderServerError):
            await use_case.execute("s1", "hi")

        assert (await texts(store))[-1] == (
            Role.SYSTEM,
            "Error occurred: service unavailable",
        )


class TestSessionLock:
    """Turns on one session are serialized."""

    async def test_concurrent_turns_do_not_interleave(
        self, store: InMemorySessionStore, runner: AsyncMock
    ) -> None:
        class SlowRouter(FakeRouter):
            async def route(
                self, user_input: str, memory: MemoryManager
            ) -> AgentResponse:
                await asyncio.sleep(0.01)
                return await super().route(user_input, memory)

        router = SlowRouter(
            [default_response(response="first"), default_response(response="second")]
        )
        use_case = make_use_case(store, router, runner)

        await asyncio.gather(
            use_case.execute("s1", "one"), use_case.execute("s1", "two")
        )

        roles = [role for role, _ in await texts(store)]
        assert roles == [Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT]
