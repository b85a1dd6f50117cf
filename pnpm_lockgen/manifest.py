"""
Project manifest and lock file inspection.

Extracts pnpm version hints from package.json and pnpm-lock.yaml. Every
reader here treats a missing or malformed file as "no hint": nothing in
this module raises for bad input.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import yaml

from .fs import read_local_file

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
PNPM_LOCK_FILE = "pnpm-lock.yaml"

# Lock files older than this format were written by pnpm < 7
LEGACY_LOCKFILE_VERSION = 5.4
LEGACY_PNPM_CONSTRAINT = "<7"


def read_package_json(project_dir: str) -> dict[str, Any] | None:
    """
    Load package.json from a project directory.

    Args:
        project_dir: Directory containing package.json

    Returns:
        Parsed manifest, or None if absent, unparsable or not a JSON object
    """
    path = os.path.join(project_dir, PACKAGE_JSON)
    content = read_local_file(path)
    if not content:
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.debug(f"Invalid JSON in {path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def get_package_manager_hint(manifest: dict[str, Any] | None, tool_name: str) -> tuple[bool, str | None]:
    """
    Read the `packageManager` field ("<name>@<version>").

    Returns:
        (declared, version): declared is True when the field is present and
        contains '@', whatever tool it names; version is set only when the
        name matches tool_name
    """
    if not manifest:
        return (False, None)
    package_manager = manifest.get("packageManager")
    if not isinstance(package_manager, str) or "@" not in package_manager:
        return (False, None)
    name, version = package_manager.split("@")[:2]
    if name == tool_name:
        return (True, version or None)
    return (True, None)


def get_engines_hint(manifest: dict[str, Any] | None, tool_name: str) -> str | None:
    """Read `engines[tool_name]` from a manifest."""
    if not manifest:
        return None
    engines = manifest.get("engines")
    if not isinstance(engines, dict):
        return None
    value = engines.get(tool_name)
    return value if isinstance(value, str) and value else None


def read_lock_file_version(project_dir: str) -> int | float | None:
    """
    Read the numeric `lockfileVersion` of pnpm-lock.yaml.

    Newer pnpm writes the version as a quoted string ('6.0'); only numeric
    values are reported, anything else yields None.
    """
    path = os.path.join(project_dir, PNPM_LOCK_FILE)
    content = read_local_file(path)
    if not content:
        return None
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.debug(f"Invalid YAML in {path}: {e}")
        return None
    if not isinstance(data, dict):
        return None
    version = data.get("lockfileVersion")
    # bool is an int subclass
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        return None
    return version


def is_legacy_lock_file_version(lockfile_version: int | float) -> bool:
    """Check whether a lock file format predates pnpm 7 (plain numeric comparison)."""
    return lockfile_version < LEGACY_LOCKFILE_VERSION
