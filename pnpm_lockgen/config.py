"""
Configuration file parsing and management.

Supports YAML configuration files with JSON fallback.
Merges configurations from multiple sources (explicit path → project → user → system → defaults).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from .models import KNOWN_POST_UPDATE_OPTIONS, GlobalPolicy, PostUpdateConfig

logger = logging.getLogger(__name__)


# Looked up in the project directory being regenerated (highest priority)
PROJECT_CONFIG_FILES = [".pnpm-lockgen.yml", ".pnpm-lockgen.yaml"]

# Global configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/pnpm-lockgen/config.yml"),   # User global
    os.path.expanduser("~/.config/pnpm-lockgen/config.yaml"),
    "/etc/pnpm-lockgen/config.yml",                            # System global
    "/etc/pnpm-lockgen/config.yaml",
]

DEFAULT_TIMEOUT_SECONDS = 900

# Environment switches that turn policy flags on
ENV_ALLOW_SCRIPTS = "PNPM_LOCKGEN_ALLOW_SCRIPTS"
ENV_EXPOSE_ALL_ENV = "PNPM_LOCKGEN_EXPOSE_ALL_ENV"


@dataclass(frozen=True)
class Settings:
    """
    Complete pnpm-lockgen configuration.

    Attributes:
        version: Config schema version
        policy: Global script/environment policy
        post_update: Default per-run configuration
        timeout_seconds: Per-command timeout for the local runner
        source: Path to the configuration file that was loaded
        timeout_explicit: Whether timeout_seconds came from a config file
    """
    version: int = 1
    policy: GlobalPolicy = field(default_factory=GlobalPolicy)
    post_update: PostUpdateConfig = field(default_factory=PostUpdateConfig)
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    source: str = ""
    timeout_explicit: bool = field(default=False, compare=False)

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if (
            isinstance(self.timeout_seconds, bool)
            or not isinstance(self.timeout_seconds, int)
            or self.timeout_seconds < 1
        ):
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be a positive integer"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Settings:
        """Create Settings from dictionary."""
        execution = data.get("execution") or {}
        return Settings(
            version=data.get("version", 1),
            policy=GlobalPolicy.from_dict(data.get("policy") or {}),
            post_update=PostUpdateConfig.from_dict(data.get("post_update") or {}),
            timeout_seconds=execution.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            source=source,
            timeout_explicit="timeout_seconds" in execution,
        )

    def merge_with(self, other: Settings) -> Settings:
        """
        Merge with a lower-priority Settings, preferring values from this one.

        Booleans are OR-ed, constraints and options are unioned (this config
        wins on conflicting constraint keys). The timeout is taken from the
        first file that sets one, even when it sets the default value.
        """
        constraints = dict(other.post_update.constraints)
        constraints.update(self.post_update.constraints)

        return Settings(
            version=self.version,
            policy=GlobalPolicy(
                allow_scripts=self.policy.allow_scripts or other.policy.allow_scripts,
                expose_all_env=self.policy.expose_all_env or other.policy.expose_all_env,
            ),
            post_update=PostUpdateConfig(
                constraints=constraints,
                post_update_options=self.post_update.post_update_options | other.post_update.post_update_options,
                ignore_scripts=self.post_update.ignore_scripts or other.post_update.ignore_scripts,
            ),
            timeout_seconds=self.timeout_seconds if self.timeout_explicit else other.timeout_seconds,
            source=self.source or other.source,
            timeout_explicit=self.timeout_explicit or other.timeout_explicit,
        )

    def with_env_overrides(self, environ: Mapping[str, str] | None = None) -> Settings:
        """Apply PNPM_LOCKGEN_* environment switches to the policy."""
        if environ is None:
            environ = os.environ
        allow_scripts = self.policy.allow_scripts or environ.get(ENV_ALLOW_SCRIPTS, "0") == "1"
        expose_all_env = self.policy.expose_all_env or environ.get(ENV_EXPOSE_ALL_ENV, "0") == "1"
        return Settings(
            version=self.version,
            policy=GlobalPolicy(allow_scripts=allow_scripts, expose_all_env=expose_all_env),
            post_update=self.post_update,
            timeout_seconds=self.timeout_seconds,
            source=self.source,
            timeout_explicit=self.timeout_explicit,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """Load a YAML file; None if unreadable or invalid."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """Load a JSON file; None if unreadable or invalid."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_settings_file(file_path: str) -> Settings | None:
    """
    Load settings from a single file.

    `.json` files are parsed as JSON; anything else as YAML, falling back
    to a sibling `.json` file when the YAML cannot be parsed.

    Args:
        file_path: Path to configuration file

    Returns:
        Settings object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    logger.debug(f"Loading config from: {file_path}")

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)
        if data is None:
            json_path = os.path.splitext(file_path)[0] + ".json"
            if os.path.exists(json_path):
                logger.debug(f"Invalid YAML, trying JSON: {json_path}")
                data = _load_json(json_path)

    if data is None:
        logger.debug(f"Invalid config file: {file_path}")
        return None

    try:
        settings = Settings.from_dict(data, source=file_path)
    except (ValueError, TypeError, AttributeError) as e:
        logger.debug(f"Config validation failed for {file_path}: {e}")
        return None

    logger.debug(f"Loaded config successfully: {file_path}")
    return settings


def load_settings(custom_path: str | None = None, project_dir: str = ".") -> Settings:
    """
    Load and merge settings from all sources.

    Precedence (highest to lowest):
    1. Custom path (if provided)
    2. <project_dir>/.pnpm-lockgen.yml (or .yaml)
    3. User ~/.config/pnpm-lockgen/config.yml
    4. System /etc/pnpm-lockgen/config.yml
    5. Defaults

    Raises:
        ValueError: If custom_path is provided but cannot be loaded
    """
    found: list[Settings] = []

    if custom_path:
        settings = load_settings_file(custom_path)
        if settings is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        found.append(settings)

    project_locations = [os.path.join(project_dir, name) for name in PROJECT_CONFIG_FILES]
    for location in project_locations + CONFIG_LOCATIONS:
        settings = load_settings_file(location)
        if settings is not None:
            found.append(settings)

    if not found:
        logger.debug("No config files found, using defaults")
        return Settings()

    merged = found[0]
    for settings in found[1:]:
        merged = merged.merge_with(settings)

    logger.debug(f"Merged {len(found)} config files")
    return merged


def validate_settings(settings: Settings) -> list[str]:
    """
    Return warnings for suspicious but loadable settings.

    Args:
        settings: Settings to check

    Returns:
        Warning messages (empty if nothing to report)
    """
    warnings = []

    for option in sorted(settings.post_update.post_update_options):
        if option not in KNOWN_POST_UPDATE_OPTIONS:
            warnings.append(f"Unknown post_update option: {option}")

    for tool_name, constraint in settings.post_update.constraints.items():
        if not constraint.strip():
            warnings.append(f"Empty constraint for '{tool_name}'")

    if settings.policy.allow_scripts and settings.post_update.ignore_scripts:
        warnings.append("allow_scripts is enabled but ignore_scripts disables scripts anyway")

    return warnings
