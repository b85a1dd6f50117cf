"""
Lock file maintenance: clear the old lock file before a full regeneration.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Sequence

from .fs import delete_local_file
from .manifest import PNPM_LOCK_FILE
from .models import Upgrade

logger = logging.getLogger(__name__)


def attempt(action: Callable[..., Any], description: str, *args: Any, **kwargs: Any) -> bool:
    """
    Run a best-effort side effect: call it, log any failure, continue.

    Args:
        action: Callable to run
        description: What the action does, used in the log message
        *args, **kwargs: Passed to action

    Returns:
        True if the action completed, False if it raised
    """
    try:
        action(*args, **kwargs)
        return True
    except Exception as e:
        logger.debug(f"Best-effort step failed ({description}): {e}")
        return False


def needs_lock_file_maintenance(upgrades: Sequence[Upgrade]) -> bool:
    return any(upgrade.is_lock_file_maintenance for upgrade in upgrades)


def remove_lock_file_for_maintenance(
    lock_file_dir: str,
    upgrades: Sequence[Upgrade],
    delete: Callable[[str], None] | None = None,
) -> bool:
    """
    Delete pnpm-lock.yaml when any upgrade is a lock file maintenance upgrade.

    A missing lock file is a valid starting point for regeneration, so
    deletion errors never abort the run.

    Returns:
        True if the lock file was removed
    """
    if not needs_lock_file_maintenance(upgrades):
        return False
    if delete is None:
        delete = delete_local_file
    lock_file_name = os.path.join(lock_file_dir, PNPM_LOCK_FILE)
    logger.debug(f"Removing {lock_file_name} first due to lock file maintenance upgrade")
    return attempt(delete, f"remove {lock_file_name} for lock file maintenance", lock_file_name)
