"""Batch command execution module.

This module runs the same list of commands on many hosts concurrently, one
telnet session per host, with a configurable concurrency limit and a
progress bar.
"""

from __future__ import annotations

from asyncio import (
    Semaphore,
    gather as asyncio_gather,
    get_running_loop as asyncio_get_running_loop,
)
from contextlib import suppress as contextlib_suppress
from dataclasses import dataclass, field
from typing import Any

from telnet_session.cli.console import complete_progress, create_progress, log, update_progress
from telnet_session.clients.telnet import TelnetSession
from telnet_session.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_PORT, DEFAULT_PROFILE, DEFAULT_STREAM_TIMEOUT
from telnet_session.exceptions import TelnetError


@dataclass(slots=True)
class CommandTarget:
    """A host to run commands on, with its login details."""

    host: str
    port: int = field(default=DEFAULT_PORT)
    username: str = field(default="")
    password: str = field(default="", repr=False)
    profile: str = field(default=DEFAULT_PROFILE)


@dataclass
class CommandResult:
    """Result of running commands on one host."""

    host: str
    port: int
    success: bool
    time_ms: float
    output: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Convert the result to a dictionary.

        Returns:
            Dictionary representation of the result
        """
        return {
            "host": self.host,
            "port": self.port,
            "success": self.success,
            "time_ms": self.time_ms,
            "output": self.output,
            "error": self.error,
        }


async def run_session(
    target: CommandTarget,
    commands: list[str],
    time_limit: float = DEFAULT_CONNECT_TIMEOUT,
    stream_timeout: float = DEFAULT_STREAM_TIMEOUT,
    strip_prompt: bool = True,
) -> CommandResult:
    """Log in to a single host and run each command in turn.

    Args:
        target: The host and its login details
        commands: Commands to run, in order
        time_limit: Connection and prompt wait timeout in seconds
        stream_timeout: Maximum silence between received bytes
        strip_prompt: Drop the trailing prompt line from each output

    Returns:
        CommandResult with the output of every command that completed
    """
    start_time = asyncio_get_running_loop().time()
    session = TelnetSession(
        host=target.host,
        port=target.port,
        connect_timeout=time_limit,
        stream_timeout=stream_timeout,
        strip_prompt=strip_prompt,
    )
    output: dict[str, str] = {}

    def elapsed_ms() -> float:
        return round((asyncio_get_running_loop().time() - start_time) * 1000, 2)

    try:
        await session.connect()
        if target.username or target.password:
            await session.login(target.username, target.password, target.profile)
        for command in commands:
            output[command] = await session.exec(command)
    except TelnetError as e:
        log.warning("Session on %s:%d failed: %s", target.host, target.port, e)
        return CommandResult(
            host=target.host, port=target.port, success=False, time_ms=elapsed_ms(), output=output, error=str(e)
        )
    finally:
        # Close errors are logged by the session and do not change the result
        with contextlib_suppress(TelnetError):
            await session.disconnect()

    return CommandResult(host=target.host, port=target.port, success=True, time_ms=elapsed_ms(), output=output)


async def run_sessions(
    targets: list[CommandTarget],
    commands: list[str],
    time_limit: float = DEFAULT_CONNECT_TIMEOUT,
    stream_timeout: float = DEFAULT_STREAM_TIMEOUT,
    max_concurrency: int = 10,
    strip_prompt: bool = True,
) -> list[CommandResult]:
    """Run commands on multiple hosts concurrently.

    Args:
        targets: Hosts to run the commands on
        commands: Commands to run on every host
        time_limit: Connection and prompt wait timeout in seconds
        stream_timeout: Maximum silence between received bytes
        max_concurrency: Maximum number of simultaneous sessions
        strip_prompt: Drop the trailing prompt line from each output

    Returns:
        List of CommandResult objects, in the same order as the targets
    """
    semaphore = Semaphore(max_concurrency)
    total = len(targets)
    task_id = create_progress(f"Running commands on {total} hosts", total=total)

    async def session_task(target: CommandTarget) -> CommandResult:
        async with semaphore:
            log.debug("Starting session on %s:%d", target.host, target.port)
            result = await run_session(target, commands, time_limit, stream_timeout, strip_prompt)

            status = "✓" if result.success else "✗"
            update_progress(task_id, advance=1, description=f"Running commands: {target.host} {status}")

            return result

    try:
        results = await asyncio_gather(*(session_task(target) for target in targets))
        complete_progress(task_id, f"Completed {total} sessions")
    except Exception:
        log.exception("Error running sessions")
        complete_progress(task_id, "Sessions failed")
        raise
    else:
        return results
