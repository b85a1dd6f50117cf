"""
pnpm-lockgen - Regenerate pnpm lock files under controlled conditions.

Core Modules:
- Constraint resolution: pnpm/node version selection from upgrades, config and project files
- Command building: install/dedupe sequence with script policy applied
- Execution: lock file maintenance, local command runner, failure classification
- Foundation: configuration, logging
"""

__version__ = "1.0.0"

VERSION = __version__

from .errors import TEMPORARY_ERROR, ExecError, LockGenError, TemporaryError, is_temporary_error
from .models import (
    ExecOptions,
    GenerateLockFileResult,
    GlobalPolicy,
    LockFileFailure,
    LockFileSuccess,
    PostUpdateConfig,
    ToolConstraint,
    Upgrade,
)
from .constraints import get_pnpm_constraint, get_pnpm_constraint_from_upgrades, resolve_pnpm_tool_constraint
from .node_version import get_node_tool_constraint
from .commands import build_commands
from .maintenance import attempt, remove_lock_file_for_maintenance
from .executor import CommandResult, exec_commands, execute_command
from .pnpm import generate_lock_file
from .config import Settings, load_settings, load_settings_file, validate_settings
from .logging_config import setup_logging

__all__ = [
    "__version__",
    "VERSION",
    # Errors
    "TEMPORARY_ERROR",
    "LockGenError",
    "TemporaryError",
    "ExecError",
    "is_temporary_error",
    # Models
    "Upgrade",
    "PostUpdateConfig",
    "GlobalPolicy",
    "ToolConstraint",
    "ExecOptions",
    "LockFileSuccess",
    "LockFileFailure",
    "GenerateLockFileResult",
    # Workflow
    "get_pnpm_constraint_from_upgrades",
    "get_pnpm_constraint",
    "resolve_pnpm_tool_constraint",
    "get_node_tool_constraint",
    "build_commands",
    "attempt",
    "remove_lock_file_for_maintenance",
    "CommandResult",
    "execute_command",
    "exec_commands",
    "generate_lock_file",
    # Foundation
    "Settings",
    "load_settings",
    "load_settings_file",
    "validate_settings",
    "setup_logging",
]
