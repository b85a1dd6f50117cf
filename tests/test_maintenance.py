"""
Tests for lock file maintenance (pnpm_lockgen/maintenance.py).
"""

from unittest.mock import MagicMock

from pnpm_lockgen.maintenance import attempt, needs_lock_file_maintenance, remove_lock_file_for_maintenance
from pnpm_lockgen.models import Upgrade

MAINTENANCE = Upgrade(is_lock_file_maintenance=True)


class TestAttempt:
    """Tests for the best-effort combinator."""

    def test_success(self):
        action = MagicMock()
        assert attempt(action, "do thing", 1, key="v") is True
        action.assert_called_once_with(1, key="v")

    def test_failure_is_swallowed(self):
        action = MagicMock(side_effect=PermissionError("denied"))
        assert attempt(action, "do thing") is False


class TestRemoveLockFile:
    """Tests for remove_lock_file_for_maintenance."""

    def test_no_maintenance_keeps_file(self, tmp_path):
        lock = tmp_path / "pnpm-lock.yaml"
        lock.write_text("lockfileVersion: 5.4\n")
        assert remove_lock_file_for_maintenance(str(tmp_path), [Upgrade(dep_name="x")]) is False
        assert lock.exists()

    def test_maintenance_removes_file(self, tmp_path):
        lock = tmp_path / "pnpm-lock.yaml"
        lock.write_text("lockfileVersion: 5.4\n")
        assert remove_lock_file_for_maintenance(str(tmp_path), [Upgrade(dep_name="x"), MAINTENANCE]) is True
        assert not lock.exists()

    def test_missing_file_is_not_an_error(self, tmp_path):
        assert remove_lock_file_for_maintenance(str(tmp_path), [MAINTENANCE]) is False

    def test_delete_error_swallowed(self, tmp_path):
        delete = MagicMock(side_effect=PermissionError("denied"))
        assert remove_lock_file_for_maintenance(str(tmp_path), [MAINTENANCE], delete=delete) is False
        delete.assert_called_once_with(str(tmp_path / "pnpm-lock.yaml"))

    def test_needs_maintenance(self):
        assert needs_lock_file_maintenance([MAINTENANCE]) is True
        assert needs_lock_file_maintenance([]) is False
