"""
pnpm lock file regeneration.

Resolves the tool versions, builds the command sequence, clears the old
lock file for maintenance upgrades, runs pnpm and reads the result back.
Tool failures come back as LockFileFailure; only infrastructure errors
(TemporaryError) are raised.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Mapping, Sequence

from .commands import build_commands
from .constraints import resolve_pnpm_tool_constraint
from .errors import is_temporary_error
from .executor import exec_commands
from .fs import read_local_file
from .maintenance import remove_lock_file_for_maintenance
from .manifest import PNPM_LOCK_FILE
from .models import (
    ExecOptions,
    GenerateLockFileResult,
    GlobalPolicy,
    LockFileFailure,
    LockFileSuccess,
    PostUpdateConfig,
    Upgrade,
)
from .node_version import get_node_tool_constraint

logger = logging.getLogger(__name__)

ExecFn = Callable[[Sequence[str], ExecOptions], Any]

# Variables always passed through to pnpm
PASSTHROUGH_ENV = ("NPM_CONFIG_CACHE", "npm_config_store")

# Credentials, only passed through when the policy exposes the environment
CREDENTIAL_ENV = ("NPM_AUTH", "NPM_EMAIL")


def build_extra_env(env: Mapping[str, str], policy: GlobalPolicy) -> dict[str, str | None]:
    """Select the environment overrides handed to pnpm."""
    extra_env: dict[str, str | None] = {name: env.get(name) for name in PASSTHROUGH_ENV}
    if policy.expose_all_env:
        for name in CREDENTIAL_ENV:
            extra_env[name] = env.get(name)
    return extra_env


def generate_lock_file(
    lock_file_dir: str,
    env: Mapping[str, str],
    config: PostUpdateConfig,
    upgrades: Sequence[Upgrade] = (),
    policy: GlobalPolicy | None = None,
    exec_fn: ExecFn = exec_commands,
) -> GenerateLockFileResult:
    """
    Regenerate pnpm-lock.yaml in lock_file_dir.

    Args:
        lock_file_dir: Directory holding package.json and pnpm-lock.yaml
        env: Environment to take cache/store (and credential) variables from
        config: Per-run configuration
        upgrades: Requested upgrades for this run
        policy: Global script/environment policy (defaults to the strict policy)
        exec_fn: Execution engine; called once with (commands, options)

    Returns:
        LockFileSuccess with the new content, or LockFileFailure with pnpm output

    Raises:
        TemporaryError: For infrastructure failures; the caller owns retries
    """
    if policy is None:
        policy = GlobalPolicy()
    lock_file_name = os.path.join(lock_file_dir, PNPM_LOCK_FILE)
    logger.debug(f"Spawning pnpm install to create {lock_file_name}")
    cmd = "pnpm"
    commands: list[str] = []

    try:
        pnpm_tool_constraint = resolve_pnpm_tool_constraint(lock_file_dir, config, upgrades)
        node_tool_constraint = get_node_tool_constraint(config, upgrades, lock_file_dir)

        exec_options = ExecOptions(
            cwd_file=lock_file_name,
            extra_env=build_extra_env(env, policy),
            tool_constraints=(node_tool_constraint, pnpm_tool_constraint),
            sandbox={},
        )

        remove_lock_file_for_maintenance(lock_file_dir, upgrades)

        commands = build_commands(config, policy, cmd=cmd)

        exec_fn(commands, exec_options)
    except Exception as err:
        if is_temporary_error(err):
            raise
        logger.debug(
            f"lock file error (type=pnpm, cmd={cmd}, commands={commands}): {err}\n"
            f"stdout: {getattr(err, 'stdout', None)}\n"
            f"stderr: {getattr(err, 'stderr', None)}"
        )
        return LockFileFailure(
            stdout=getattr(err, "stdout", None),
            stderr=getattr(err, "stderr", None),
        )

    lock_file = read_local_file(lock_file_name)
    if lock_file is None:
        logger.debug(f"pnpm completed but {lock_file_name} could not be read")
    return LockFileSuccess(lock_file=lock_file)
