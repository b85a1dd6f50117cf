"""
Data types for a single lock file regeneration run.

Everything here is immutable and built fresh per run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Union


# Post-update option requesting a `pnpm dedupe` after install
PNPM_DEDUPE = "pnpmDedupe"

KNOWN_POST_UPDATE_OPTIONS = frozenset({PNPM_DEDUPE})


@dataclass(frozen=True)
class Upgrade:
    """
    One requested dependency change.

    Attributes:
        dep_name: Dependency name (may be "pnpm" or "node" themselves)
        new_version: Target version, if any
        is_lock_file_maintenance: Whether this is a full lock file maintenance pass
        dep_type: Where the dependency is declared (e.g. "dependencies", "volta")
    """
    dep_name: str | None = None
    new_version: str | None = None
    is_lock_file_maintenance: bool = False
    dep_type: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Upgrade:
        """Create Upgrade from dictionary (accepts camelCase keys)."""
        return Upgrade(
            dep_name=data.get("dep_name", data.get("depName")),
            new_version=data.get("new_version", data.get("newVersion")),
            is_lock_file_maintenance=bool(
                data.get("is_lock_file_maintenance", data.get("isLockFileMaintenance", False))
            ),
            dep_type=data.get("dep_type", data.get("depType")),
        )


def _as_option_names(value: Any) -> frozenset[str]:
    """Normalize a config value to option names; a lone YAML scalar is one option."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"Invalid post_update_options: {value!r}. Must be a list of option names")
    return frozenset(str(option) for option in value)


@dataclass(frozen=True)
class PostUpdateConfig:
    """
    Per-run configuration for lock file regeneration.

    Attributes:
        constraints: Tool name -> version range (e.g. {"pnpm": "^8"})
        post_update_options: Extra steps requested after install (e.g. "pnpmDedupe")
        ignore_scripts: Disable lifecycle scripts for this run
    """
    constraints: Mapping[str, str] = field(default_factory=dict)
    post_update_options: frozenset[str] = frozenset()
    ignore_scripts: bool = False

    def __post_init__(self):
        if isinstance(self.post_update_options, str):
            raise ValueError(
                f"Invalid post_update_options: {self.post_update_options!r}. "
                "Must be a list of option names"
            )
        # Accept any iterable of options but store a frozenset
        if not isinstance(self.post_update_options, frozenset):
            object.__setattr__(self, "post_update_options", frozenset(self.post_update_options))

    @staticmethod
    def from_dict(data: dict[str, Any]) -> PostUpdateConfig:
        """Create PostUpdateConfig from dictionary."""
        return PostUpdateConfig(
            constraints={
                str(name): str(value)
                for name, value in (data.get("constraints") or {}).items()
                if value is not None
            },
            post_update_options=_as_option_names(data.get("post_update_options")),
            ignore_scripts=bool(data.get("ignore_scripts", False)),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "constraints": dict(self.constraints),
            "post_update_options": sorted(self.post_update_options),
            "ignore_scripts": self.ignore_scripts,
        }


@dataclass(frozen=True)
class GlobalPolicy:
    """
    Installation-wide policy switches.

    Attributes:
        allow_scripts: Whether package lifecycle scripts may run at all
        expose_all_env: Whether credentials from the environment are passed to pnpm
    """
    allow_scripts: bool = False
    expose_all_env: bool = False

    @staticmethod
    def from_dict(data: dict[str, Any]) -> GlobalPolicy:
        """Create GlobalPolicy from dictionary."""
        return GlobalPolicy(
            allow_scripts=bool(data.get("allow_scripts", False)),
            expose_all_env=bool(data.get("expose_all_env", False)),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "allow_scripts": self.allow_scripts,
            "expose_all_env": self.expose_all_env,
        }


@dataclass(frozen=True)
class ToolConstraint:
    """Version range restricting which build of a tool may be invoked."""
    tool_name: str
    constraint: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"tool_name": self.tool_name, "constraint": self.constraint}


@dataclass(frozen=True)
class ExecOptions:
    """
    Everything the execution engine needs besides the commands.

    Attributes:
        cwd_file: File whose directory anchors the working directory
        extra_env: Environment overrides (None values are dropped by the runner)
        tool_constraints: Tool versions the runner should honour
        sandbox: Opaque sandbox settings for container-based runners
    """
    cwd_file: str
    extra_env: Mapping[str, str | None] = field(default_factory=dict)
    tool_constraints: tuple[ToolConstraint, ...] = ()
    sandbox: Mapping[str, Any] = field(default_factory=dict)

    @property
    def cwd(self) -> str:
        """Working directory derived from cwd_file."""
        return os.path.dirname(self.cwd_file) or "."

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "cwd_file": self.cwd_file,
            "extra_env": dict(self.extra_env),
            "tool_constraints": [tc.to_dict() for tc in self.tool_constraints],
            "sandbox": dict(self.sandbox),
        }


@dataclass(frozen=True)
class LockFileSuccess:
    """Regeneration succeeded; lock_file is None if it could not be read back."""
    lock_file: str | None

    @property
    def error(self) -> bool:
        return False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"error": False, "lock_file": self.lock_file}


@dataclass(frozen=True)
class LockFileFailure:
    """Regeneration failed; carries whatever output pnpm produced."""
    stdout: str | None = None
    stderr: str | None = None

    @property
    def error(self) -> bool:
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"error": True, "stdout": self.stdout, "stderr": self.stderr}


GenerateLockFileResult = Union[LockFileSuccess, LockFileFailure]
