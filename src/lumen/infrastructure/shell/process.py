"""Subprocess handling shared by the blocking and streaming executors."""

import asyncio
import codecs
import logging
import os
import signal
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from lumen.domain.entities import ExecutionEventType

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
EXIT_POLL_SECONDS = 0.05

OutputCallback = Callable[[ExecutionEventType, str], Awaitable[None]]


@dataclass(frozen=True)
class ProcessOutcome:
    """What happened to a spawned process.

    ``exit_code`` is None when the process was terminated by a signal.
    """

    exit_code: int | None
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False
    killed: bool = False


class ProcessRunner:
    """Runs ``shell -c command`` in its own process group with a deadline."""

    def __init__(self, shell: str = "/bin/bash", kill_grace_seconds: float = 5.0) -> None:
        """Initialize the runner.

        Args:
            shell: Shell binary.
            kill_grace_seconds: Wait between SIGTERM and SIGKILL on timeout.
        """
        self._shell = shell
        self._kill_grace_seconds = kill_grace_seconds

    async def run(
        self,
        command: str,
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout_ms: int,
        on_output: OutputCallback | None = None,
    ) -> ProcessOutcome:
        """Spawn the command and wait for it, reading both pipes as it runs.

        Args:
            command: Shell command text.
            cwd: Working directory.
            env: Extra environment variables, layered over the current ones.
            timeout_ms: Deadline after which the process group is signalled.
            on_output: Awaited with each decoded stdout/stderr chunk.

        Returns:
            The process outcome.

        Raises:
            OSError: The process could not be spawned.
        """
        started = time.monotonic()
        process = await asyncio.create_subprocess_exec(
            self._shell,
            "-c",
            command,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        logger.debug("Spawned pid %d: %s", process.pid, command)

        stdout_parts: list[str] = []
        stderr_parts: list[str] = []
        pumps = [
            asyncio.create_task(
                _pump(process.stdout, ExecutionEventType.STDOUT, stdout_parts, on_output)
            ),
            asyncio.create_task(
                _pump(process.stderr, ExecutionEventType.STDERR, stderr_parts, on_output)
            ),
        ]

        timed_out = False
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning("Command exceeded %dms timeout: %s", timeout_ms, command)
            await self._terminate(process)
            await self._settle_pumps(pumps)
        except asyncio.CancelledError:
            for task in pumps:
                task.cancel()
            raise
        else:
            await asyncio.gather(*pumps)

        return_code = process.returncode
        return ProcessOutcome(
            exit_code=return_code if return_code is not None and return_code >= 0 else None,
            stdout="".join(stdout_parts),
            stderr="".join(stderr_parts),
            duration_ms=int((time.monotonic() - started) * 1000),
            timed_out=timed_out,
            killed=timed_out,
        )

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        _signal_group(process, signal.SIGTERM)
        if await _wait_exit(process, self._kill_grace_seconds):
            return
        logger.warning("Process %d ignored SIGTERM, sending SIGKILL", process.pid)
        _signal_group(process, signal.SIGKILL)
        if not await _wait_exit(process, self._kill_grace_seconds):
            logger.error("Process %d did not exit after SIGKILL", process.pid)

    async def _settle_pumps(self, pumps: list[asyncio.Task[None]]) -> None:
        # A process that left the group can keep the pipes open indefinitely.
        done, pending = await asyncio.wait(pumps, timeout=self._kill_grace_seconds)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(
                "Output pipes still open %.1fs after kill, abandoning them",
                self._kill_grace_seconds,
            )
            await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            task.result()


async def _wait_exit(process: asyncio.subprocess.Process, timeout: float) -> bool:
    """Wait until the process itself exits, regardless of its pipes.

    ``Process.wait`` also waits for stdout and stderr to close, which a
    detached grandchild can prevent forever.

    Returns:
        True if the process exited within ``timeout`` seconds.
    """
    deadline = time.monotonic() + timeout
    while process.returncode is None:
        if time.monotonic() >= deadline:
            return False
        await asyncio.sleep(EXIT_POLL_SECONDS)
    return True


def _signal_group(process: asyncio.subprocess.Process, sig: signal.Signals) -> None:
    # The group id equals the pid because of start_new_session.
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        pass


async def _pump(
    stream: asyncio.StreamReader | None,
    event_type: ExecutionEventType,
    parts: list[str],
    on_output: OutputCallback | None,
) -> None:
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        text = decoder.decode(chunk, final=not chunk)
        if text:
            parts.append(text)
            if on_output is not None:
                await on_output(event_type, text)
        if not chunk:
            return
