"""
pnpm command sequence construction.

The builder is pure: it only inspects its arguments and returns a fresh
list. Order is fixed: install first, then the optional dedupe.
"""

from __future__ import annotations

import logging

from .models import PNPM_DEDUPE, GlobalPolicy, PostUpdateConfig

logger = logging.getLogger(__name__)

INSTALL_ARGS = ("install", "--recursive", "--lockfile-only")
IGNORE_SCRIPTS_ARGS = ("--ignore-scripts", "--ignore-pnpmfile")


def scripts_disabled(config: PostUpdateConfig, policy: GlobalPolicy) -> bool:
    """Scripts are off unless globally allowed and not disabled for this run."""
    return not policy.allow_scripts or config.ignore_scripts


def build_commands(
    config: PostUpdateConfig,
    policy: GlobalPolicy,
    cmd: str = "pnpm",
) -> list[str]:
    """
    Build the ordered commands for regenerating the lock file.

    Args:
        config: Per-run configuration
        policy: Global script policy
        cmd: pnpm executable name

    Returns:
        Command strings, install first
    """
    args = list(INSTALL_ARGS)
    if scripts_disabled(config, policy):
        args.extend(IGNORE_SCRIPTS_ARGS)
    install_args = " ".join(args)
    logger.debug(f"pnpm command: {cmd} {install_args}")

    commands = [f"{cmd} {install_args}"]

    if PNPM_DEDUPE in config.post_update_options:
        logger.debug("Performing pnpm dedupe")
        commands.append(f"{cmd} dedupe")

    return commands
