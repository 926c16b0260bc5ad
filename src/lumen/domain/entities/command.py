"""Command proposal and execution result entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from lumen.domain.exceptions import (
    ApprovalRequiredError,
    BlockedCommandError,
    CommandTimeoutError,
    ExecutionError,
    ValidationError,
)


class ExecutionStatus(Enum):
    """Outcome of an execution attempt."""

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"
    BLOCKED = "blocked"
    APPROVAL_REQUIRED = "approval_required"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class CommandProposal:
    """A candidate shell command produced by the router.

    Attributes:
        command: Shell command text.
        reasoning: Human-readable rationale.
        requires_approval: Whether the caller must confirm before running.
        cwd: Working directory (None means the current directory).
        timeout_ms: Per-proposal timeout override.
    """

    command: str
    reasoning: str = ""
    requires_approval: bool = False
    cwd: str | None = None
    timeout_ms: int | None = None

    def validate(self) -> None:
        """Check the proposal is usable.

        Raises:
            ValidationError: The command is empty or the timeout is invalid.
        """
        if not isinstance(self.command, str) or not self.command.strip():
            raise ValidationError("Command must be a non-empty string")
        if self.timeout_ms is not None and (
            not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0
        ):
            raise ValidationError(
                f"timeout_ms must be positive, got {self.timeout_ms}"
            )


@dataclass(frozen=True)
class ExecutionOptions:
    """Per-call execution switches."""

    auto_approve: bool = False
    dry_run: bool = False
    timeout_ms: int | None = None
    env: Mapping[str, str] | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """Immutable result of one execution attempt.

    Attributes:
        command: The command that was (or would have been) run.
        status: Outcome.
        exit_code: Process exit code; None when no process exited normally.
        stdout: Full captured standard output.
        stderr: Full captured standard error.
        duration_ms: Wall time from spawn to exit.
        killed: True when the timeout path signalled the process.
        message: Explanation for non-process outcomes.
    """

    command: str
    status: ExecutionStatus
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    killed: bool = False
    message: str | None = None
    timeout_ms: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    def feedback_text(self) -> str:
        """Text fed back into conversational memory."""
        detail = self.stdout or self.stderr or self.message or ""
        return f"Command {self.status.value}. {detail}".rstrip()

    def raise_for_status(self) -> None:
        """Raise the typed error matching a non-success status.

        DRY_RUN and SUCCESS return silently.
        """
        if self.status == ExecutionStatus.BLOCKED:
            raise BlockedCommandError(self.command, self.message or "")
        if self.status == ExecutionStatus.APPROVAL_REQUIRED:
            raise ApprovalRequiredError(self.command, self.message or "")
        if self.status == ExecutionStatus.TIMEOUT:
            raise CommandTimeoutError(self.command, self.timeout_ms)
        if self.status == ExecutionStatus.ERROR:
            raise ExecutionError(self.command, self.exit_code, self.message or "")

    def to_dict(self) -> dict[str, Any]:
        """Wire shape used in ``complete`` events."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "exitCode": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration": self.duration_ms,
            "killed": self.killed,
        }
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class AuditEntry:
    """One audit record written after every execution attempt.

    Blocked and gated attempts carry no stdout/stderr/duration since
    nothing was spawned.
    """

    status: str
    command: str
    reasoning: str | None = None
    stdout: str | None = None
    stderr: str | None = None
    message: str | None = None
    duration_ms: int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
            "command": self.command,
        }
        optional = {
            "reasoning": self.reasoning,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "message": self.message,
            "duration": self.duration_ms,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data
