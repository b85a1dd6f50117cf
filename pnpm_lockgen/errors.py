"""
Error types for lock file generation.

Two categories matter to callers:
- TemporaryError: environmental/transient failure, always propagated so the
  caller can retry the whole regeneration
- ExecError: the pnpm invocation itself failed; converted into a
  LockFileFailure result by the coordinator
"""

from __future__ import annotations


# Well-known message identifying a temporary/infrastructure failure
TEMPORARY_ERROR = "temporary-error"


class LockGenError(Exception):
    """
    Base exception for lock file generation errors.

    Attributes:
        message: Human-readable error message
        retryable: Whether the caller may retry the operation
        remediation: Suggested fix for the error
    """
    def __init__(
        self,
        message: str,
        retryable: bool = False,
        remediation: str | None = None,
    ):
        self.message = message
        self.retryable = retryable
        self.remediation = remediation
        super().__init__(message)


class TemporaryError(LockGenError):
    """
    Infrastructure failure that must propagate for retry.

    The message is always TEMPORARY_ERROR; the underlying cause goes in
    `reason` so that message matching stays exact.
    """
    def __init__(self, reason: str | None = None, remediation: str | None = None):
        super().__init__(TEMPORARY_ERROR, retryable=True, remediation=remediation)
        self.reason = reason


class ExecError(LockGenError):
    """
    A command in the execution sequence failed.

    Attributes:
        cmd: Command string that failed
        stdout: Captured standard output (all commands run so far)
        stderr: Captured standard error (all commands run so far)
        exit_code: Process exit code (-1 if the process never ran)
        step_index: Zero-based position of the failing command
    """
    def __init__(
        self,
        message: str,
        cmd: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = -1,
        step_index: int = 0,
    ):
        super().__init__(message)
        self.cmd = cmd
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.step_index = step_index


def is_temporary_error(err: BaseException) -> bool:
    """
    Check whether an error is the infrastructure category.

    Matches the TemporaryError type, or any exception whose message is
    exactly TEMPORARY_ERROR (for runners that raise plain exceptions).
    """
    if isinstance(err, TemporaryError):
        return True
    message = getattr(err, "message", None)
    if message is None:
        message = str(err)
    return message == TEMPORARY_ERROR
