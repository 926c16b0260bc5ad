"""Blocking command execution behind the safety envelope."""

import logging
import os
import shlex

from lumen.config import ExecutionConfig
from lumen.domain.entities import (
    AuditEntry,
    CommandProposal,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStatus,
)
from lumen.domain.exceptions import ValidationError
from lumen.domain.services.command_safety import is_dangerous
from lumen.domain.services.protocols import AuditSink
from lumen.infrastructure.shell.process import (
    OutputCallback,
    ProcessOutcome,
    ProcessRunner,
)

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Command blocked: Contains dangerous patterns"


class ShellExecutorBase:
    """Gating, process handling and auditing shared by both executors.

    Gates run in order: validation, dangerous patterns, approval, dry run.
    Only a proposal that passes all of them is spawned.
    """

    def __init__(
        self,
        audit_sink: AuditSink,
        config: ExecutionConfig | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            audit_sink: Receives one entry per execution attempt.
            config: Execution settings.
            runner: Process runner (built from config when omitted).
        """
        self._audit_sink = audit_sink
        self._config = config or ExecutionConfig()
        self._runner = runner or ProcessRunner(
            shell=self._config.shell,
            kill_grace_seconds=self._config.kill_grace_seconds,
        )

    async def _gate(
        self, proposal: CommandProposal, options: ExecutionOptions
    ) -> ExecutionResult | None:
        """Return a result when a gate stops the proposal, else None.

        Raises:
            ValidationError: The proposal is malformed or unparseable.
        """
        proposal.validate()
        command = proposal.command

        if is_dangerous(command):
            logger.warning("Blocked dangerous command: %s", command)
            result = ExecutionResult(
                command=command,
                status=ExecutionStatus.BLOCKED,
                message=BLOCKED_MESSAGE,
            )
            await self._audit(proposal, result, spawned=False)
            return result

        if proposal.requires_approval and not options.auto_approve:
            logger.info("Command requires approval: %s", command)
            return ExecutionResult(
                command=command,
                status=ExecutionStatus.APPROVAL_REQUIRED,
                message=proposal.reasoning or "Command requires approval",
            )

        if options.dry_run:
            try:
                shlex.split(command)
            except ValueError as e:
                raise ValidationError(f"Unparseable command: {e}") from e
            return ExecutionResult(
                command=command,
                status=ExecutionStatus.DRY_RUN,
                message=f"Dry run: {command}",
            )

        return None

    def _timeout_ms(
        self, proposal: CommandProposal, options: ExecutionOptions, default: int
    ) -> int:
        return options.timeout_ms or proposal.timeout_ms or default

    async def _run(
        self,
        proposal: CommandProposal,
        options: ExecutionOptions,
        timeout_ms: int,
        on_output: OutputCallback | None = None,
    ) -> ExecutionResult:
        """Spawn the command and audit the result."""
        try:
            outcome = await self._runner.run(
                proposal.command,
                cwd=proposal.cwd,
                env=options.env,
                timeout_ms=timeout_ms,
                on_output=on_output,
            )
        except OSError as e:
            logger.error("Failed to spawn command %r: %s", proposal.command, e)
            result = ExecutionResult(
                command=proposal.command,
                status=ExecutionStatus.ERROR,
                message=f"Failed to start command: {e}",
            )
            spawned = False
        else:
            result = _to_result(proposal.command, outcome, timeout_ms)
            spawned = True

        logger.info(
            "Command finished with status %s in %dms: %s",
            result.status.value,
            result.duration_ms,
            proposal.command,
        )
        await self._audit(proposal, result, spawned=spawned)
        return result

    async def _audit(
        self, proposal: CommandProposal, result: ExecutionResult, spawned: bool
    ) -> None:
        limit = self._config.audit_output_limit
        entry = AuditEntry(
            status=result.status.value,
            command=result.command,
            reasoning=proposal.reasoning or None,
            stdout=result.stdout[:limit] if spawned else None,
            stderr=result.stderr[:limit] if spawned else None,
            message=result.message,
            duration_ms=result.duration_ms if spawned else None,
        )
        await self._audit_sink.record(entry)


def _to_result(command: str, outcome: ProcessOutcome, timeout_ms: int) -> ExecutionResult:
    if outcome.timed_out:
        status = ExecutionStatus.TIMEOUT
        message = f"Command exceeded {timeout_ms}ms timeout"
    elif outcome.exit_code == 0:
        status = ExecutionStatus.SUCCESS
        message = None
    else:
        status = ExecutionStatus.ERROR
        message = None
    return ExecutionResult(
        command=command,
        status=status,
        exit_code=outcome.exit_code,
        stdout=outcome.stdout,
        stderr=outcome.stderr,
        duration_ms=outcome.duration_ms,
        killed=outcome.killed,
        message=message,
        timeout_ms=timeout_ms,
    )


class CommandExecutor(ShellExecutorBase):
    """Runs a command to completion and returns the full result."""

    async def execute(
        self,
        proposal: CommandProposal,
        options: ExecutionOptions | None = None,
    ) -> ExecutionResult:
        """Execute a proposal.

        Gate outcomes (blocked, approval required, dry run) are returned
        as results rather than raised; call ``raise_for_status`` on the
        result for exception-style handling.

        Args:
            proposal: Command to run.
            options: Execution switches.

        Returns:
            The execution result.

        Raises:
            ValidationError: The proposal is malformed.
        """
        options = options or ExecutionOptions()
        gated = await self._gate(proposal, options)
        if gated is not None:
            return gated

        timeout_ms = self._timeout_ms(proposal, options, self._config.timeout_ms)
        logger.info(
            "Executing command in %s: %s", proposal.cwd or os.getcwd(), proposal.command
        )
        return await self._run(proposal, options, timeout_ms)
