"""
Local file access used while regenerating lock files.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def read_local_file(path: str, encoding: str = "utf-8") -> str | None:
    """Read a text file, returning None if it is missing or unreadable.

    Args:
        path: Path to the file
        encoding: Text encoding

    Returns:
        File content, or None on any read error
    """
    try:
        # newline="" keeps CRLF line endings exactly as written
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Error reading local file {path}: {e}")
        return None


def delete_local_file(path: str) -> None:
    """Delete a file. Raises OSError (including FileNotFoundError) on failure."""
    os.remove(path)

