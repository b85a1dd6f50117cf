"""
Local command execution for lock file generation.

Runs the command sequence in order inside the project directory and stops
at the first failing command. Transient failures (network resets, lock
contention, timeouts) surface as TemporaryError so the caller can retry the
whole regeneration; everything else surfaces as ExecError.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Mapping, Sequence

from .errors import ExecError, TemporaryError
from .models import ExecOptions

logger = logging.getLogger(__name__)

# Process environment variables passed through to child processes
BASE_ENV_VARS = (
    "PATH",
    "HOME",
    "USER",
    "LANG",
    "LC_ALL",
    "TZ",
    "TMPDIR",
    "SHELL",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "NO_PROXY",
)

# Exit codes that indicate a temporary condition (EX_TEMPFAIL, ECONNREFUSED)
RETRYABLE_EXIT_CODES = frozenset({75, 111})


@dataclass(frozen=True)
class CommandResult:
    """
    Result of running a single command.

    Attributes:
        command: Command string that was run
        success: Whether the command exited with status 0
        stdout: Standard output
        stderr: Standard error
        exit_code: Process exit code (-1 if it never ran or timed out)
        duration_seconds: Wall-clock time spent
        error_message: Human-readable error message if failed
        timed_out: Whether the command hit the timeout
    """
    command: str
    success: bool
    stdout: str
    stderr: str
    exit_code: int
    duration_seconds: float
    error_message: str | None = None
    timed_out: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": self.command,
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "duration_seconds": self.duration_seconds,
            "error_message": self.error_message,
            "timed_out": self.timed_out,
        }


def is_retryable_failure(exit_code: int, stderr: str, timed_out: bool = False) -> bool:
    """
    Determine whether a failure is environmental rather than a pnpm error.

    Args:
        exit_code: Process exit code
        stderr: Standard error output
        timed_out: Whether the command was killed for exceeding its timeout

    Returns:
        True if the failure is transient and the run should be retried
    """
    if timed_out:
        return True

    lowered = stderr.lower()

    # Network-related errors
    if any(indicator in lowered for indicator in [
        "econnreset",
        "etimedout",
        "eai_again",
        "connection refused",
        "connection reset",
        "socket hang up",
        "temporary failure",
        "network unreachable",
    ]):
        return True

    # Store/cache lock contention
    if any(indicator in lowered for indicator in [
        "eagain",
        "ebusy",
        "waiting for cache lock",
    ]):
        return True

    return exit_code in RETRYABLE_EXIT_CODES


def build_env(extra_env: Mapping[str, str | None]) -> dict[str, str]:
    """
    Build the child process environment.

    Only an allow-list of the current environment is inherited; extra_env
    entries whose value is None are dropped.
    """
    env = {name: os.environ[name] for name in BASE_ENV_VARS if name in os.environ}
    for name, value in extra_env.items():
        if value is not None:
            env[name] = value
    return env


def execute_command(
    command: str,
    cwd: str,
    env: Mapping[str, str],
    timeout: int | None = None,
) -> CommandResult:
    """
    Run a single command and capture its output.

    Args:
        command: Shell-style command string (split with shlex, no shell)
        cwd: Working directory
        env: Complete environment for the child process
        timeout: Timeout in seconds (None for no limit)

    Returns:
        CommandResult with execution outcome
    """
    start_time = time.time()
    logger.debug(f"Executing: {command} (cwd={cwd})")

    try:
        result = subprocess.run(
            shlex.split(command),
            cwd=cwd,
            env=dict(env),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return CommandResult(
            command=command,
            success=False,
            stdout=_decode(e.stdout),
            stderr=_decode(e.stderr),
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError:
        return CommandResult(
            command=command,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command not found: {shlex.split(command)[0]}",
        )

    duration = time.time() - start_time
    success = result.returncode == 0

    error_msg = None
    if not success:
        error_msg = f"Command failed with exit code {result.returncode}"
        if result.stderr:
            error_msg += f": {result.stderr[:200]}"

    return CommandResult(
        command=command,
        success=success,
        stdout=result.stdout,
        stderr=result.stderr,
        exit_code=result.returncode,
        duration_seconds=duration,
        error_message=error_msg,
    )


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


def exec_commands(
    commands: Sequence[str],
    options: ExecOptions,
    timeout: int | None = None,
) -> list[CommandResult]:
    """
    Run commands in order, stopping at the first failure.

    Args:
        commands: Command strings, run in order
        options: Working directory anchor, environment and tool constraints
        timeout: Per-command timeout in seconds

    Returns:
        Results of all commands (all successful)

    Raises:
        TemporaryError: If a command failed for a transient reason
        ExecError: If a command failed otherwise; step_index names it
    """
    env = build_env(options.extra_env)
    for constraint in options.tool_constraints:
        if constraint.constraint:
            logger.debug(f"Tool constraint: {constraint.tool_name} {constraint.constraint}")

    results: list[CommandResult] = []
    for index, command in enumerate(commands):
        result = execute_command(command, options.cwd, env, timeout)
        results.append(result)
        if result.success:
            continue

        if is_retryable_failure(result.exit_code, result.stderr, result.timed_out):
            logger.debug(f"Transient failure running {command}: {result.error_message}")
            raise TemporaryError(reason=result.error_message)

        raise ExecError(
            result.error_message or f"Command failed: {command}",
            cmd=command,
            stdout="".join(r.stdout for r in results),
            stderr="".join(r.stderr for r in results),
            exit_code=result.exit_code,
            step_index=index,
        )

    return results
