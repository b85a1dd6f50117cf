"""
Node.js version constraint for running pnpm.
"""

from __future__ import annotations

import logging
import os
from typing import Sequence

from .fs import read_local_file
from .manifest import get_engines_hint, read_package_json
from .models import PostUpdateConfig, ToolConstraint, Upgrade

logger = logging.getLogger(__name__)

NODE = "node"

# Version files checked in order
NODE_VERSION_FILES = (".nvmrc", ".node-version")


def get_node_update(upgrades: Sequence[Upgrade]) -> str | None:
    """Return the new node version from a volta-pinned node upgrade, if any."""
    for upgrade in upgrades:
        if upgrade.dep_name == NODE and upgrade.dep_type == "volta" and upgrade.new_version:
            return upgrade.new_version
    return None


def get_node_file_constraint(lock_file_dir: str) -> str | None:
    """Read the first non-empty line of .nvmrc or .node-version."""
    for file_name in NODE_VERSION_FILES:
        content = read_local_file(os.path.join(lock_file_dir, file_name))
        if not content:
            continue
        for line in content.splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                logger.debug(f"Using node constraint {line} from {file_name}")
                return line
    return None


def get_node_tool_constraint(
    config: PostUpdateConfig,
    upgrades: Sequence[Upgrade],
    lock_file_dir: str,
) -> ToolConstraint:
    """
    Resolve the node constraint needed to run pnpm.

    Precedence: volta node upgrade, config constraint, .nvmrc/.node-version,
    package.json engines.node.
    """
    constraint = (
        get_node_update(upgrades)
        or config.constraints.get(NODE)
        or get_node_file_constraint(lock_file_dir)
        or get_engines_hint(read_package_json(lock_file_dir), NODE)
    )
    return ToolConstraint(tool_name=NODE, constraint=constraint or None)
