"""Domain exceptions."""


class LumenError(Exception):
    """Base exception for lumen domain errors."""


class ValidationError(LumenError):
    """A command proposal is malformed or missing required fields."""


class BlockedCommandError(LumenError):
    """A command matched a dangerous pattern and was not executed."""

    def __init__(self, command: str, message: str = "") -> None:
        self.command = command
        super().__init__(message or "Command blocked: contains dangerous patterns")


class ApprovalRequiredError(LumenError):
    """A command needs explicit approval before it can run.

    This is a gate, not a failure: re-invoke with approval to proceed.
    """

    def __init__(self, command: str, reasoning: str = "") -> None:
        self.command = command
        self.reasoning = reasoning
        super().__init__(f"Command requires approval: {command}")


class ExecutionError(LumenError):
    """A command exited with a non-zero code or could not be spawned."""

    def __init__(self, command: str, exit_code: int | None, message: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        super().__init__(message or f"Command failed with exit code {exit_code}")


class CommandTimeoutError(LumenError):
    """A command exceeded its time bound and was killed."""

    def __init__(self, command: str, timeout_ms: int | None = None) -> None:
        self.command = command
        self.timeout_ms = timeout_ms
        if timeout_ms is None:
            message = "Command timed out"
        else:
            message = f"Command exceeded {timeout_ms}ms timeout"
        super().__init__(message)


class RoutingError(LumenError):
    """An agent name is not part of the schema registry."""

    def __init__(self, agent_name: str) -> None:
        self.agent_name = agent_name
        super().__init__(f"Unknown agent: {agent_name}")


class ChannelClosedError(LumenError):
    """The output channel of a streaming execution is no longer writable."""
