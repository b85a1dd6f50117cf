"""
pnpm version constraint resolution.

Precedence (first match wins):
1. An upgrade of pnpm itself (exact new version)
2. An explicit constraint in the post-update config
3. package.json `packageManager` ("pnpm@<version>")
4. package.json `engines.pnpm` (only when no packageManager is declared)
5. A legacy lock file format, which pins pnpm below major 7
6. Unconstrained
"""

from __future__ import annotations

import logging
from typing import Sequence

from .manifest import (
    LEGACY_PNPM_CONSTRAINT,
    get_engines_hint,
    get_package_manager_hint,
    is_legacy_lock_file_version,
    read_lock_file_version,
    read_package_json,
)
from .models import PostUpdateConfig, ToolConstraint, Upgrade

logger = logging.getLogger(__name__)

PNPM = "pnpm"


def get_pnpm_constraint_from_upgrades(upgrades: Sequence[Upgrade]) -> str | None:
    """Return the new version of the first upgrade that targets pnpm itself."""
    for upgrade in upgrades:
        if upgrade.dep_name == PNPM and upgrade.new_version:
            return upgrade.new_version
    return None


def get_pnpm_constraint(lock_file_dir: str) -> str | None:
    """
    Derive a pnpm constraint from the project files.

    Args:
        lock_file_dir: Directory holding package.json and pnpm-lock.yaml

    Returns:
        Constraint string, or None if the project gives no hint
    """
    result: str | None = None

    manifest = read_package_json(lock_file_dir)
    declared, version = get_package_manager_hint(manifest, PNPM)
    if declared:
        result = version
    else:
        result = get_engines_hint(manifest, PNPM)

    if not result:
        lockfile_version = read_lock_file_version(lock_file_dir)
        if lockfile_version is not None and is_legacy_lock_file_version(lockfile_version):
            logger.debug(f"Lock file version {lockfile_version} requires pnpm {LEGACY_PNPM_CONSTRAINT}")
            result = LEGACY_PNPM_CONSTRAINT

    return result or None


def resolve_pnpm_tool_constraint(
    lock_file_dir: str,
    config: PostUpdateConfig,
    upgrades: Sequence[Upgrade] = (),
) -> ToolConstraint:
    """
    Resolve the effective pnpm constraint for one regeneration run.

    Project files are only read when neither the upgrades nor the config
    decide the version.
    """
    constraint = get_pnpm_constraint_from_upgrades(upgrades)
    source = "upgrade"
    if constraint is None:
        constraint = config.constraints.get(PNPM) or None
        source = "config"
    if constraint is None:
        constraint = get_pnpm_constraint(lock_file_dir)
        source = "project"

    logger.debug(f"pnpm constraint: {constraint or '<none>'} (source: {source})")
    return ToolConstraint(tool_name=PNPM, constraint=constraint)
