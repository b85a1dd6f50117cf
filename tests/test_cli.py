"""
Tests for the lockgen.py command-line script.
"""

import argparse
import json
from unittest.mock import patch

import pytest

import lockgen
from pnpm_lockgen.config import Settings
from pnpm_lockgen.errors import TemporaryError
from pnpm_lockgen.models import LockFileFailure, LockFileSuccess, Upgrade


class TestParseUpgrade:

    def test_plain(self):
        assert lockgen.parse_upgrade("pnpm@8.6.0") == Upgrade(dep_name="pnpm", new_version="8.6.0")

    def test_scoped(self):
        assert lockgen.parse_upgrade("@types/node@20.1.0") == Upgrade(dep_name="@types/node", new_version="20.1.0")

    @pytest.mark.parametrize("value", ["pnpm", "pnpm@", "@8.6.0"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            lockgen.parse_upgrade(value)


@patch("lockgen.load_settings", return_value=Settings())
@patch("lockgen.generate_lock_file")
class TestMain:
    """Tests for main()."""

    def test_success(self, mock_generate, mock_settings, tmp_path):
        mock_generate.return_value = LockFileSuccess(lock_file="x")
        assert lockgen.main([str(tmp_path), "-q"]) == 0

    def test_flags_reach_workflow(self, mock_generate, mock_settings, tmp_path):
        mock_generate.return_value = LockFileSuccess(lock_file="x")
        lockgen.main([
            str(tmp_path), "-q", "--upgrade", "pnpm@8.6.0", "--lock-file-maintenance",
            "--dedupe", "--allow-scripts",
        ])

        args, kwargs = mock_generate.call_args
        lock_file_dir, env, config, upgrades = args
        assert lock_file_dir == str(tmp_path)
        assert "pnpmDedupe" in config.post_update_options
        assert upgrades == [Upgrade(dep_name="pnpm", new_version="8.6.0"), Upgrade(is_lock_file_maintenance=True)]
        assert kwargs["policy"].allow_scripts is True
        assert kwargs["exec_fn"].keywords == {"timeout": Settings().timeout_seconds}

    def test_settings_loaded_for_target_directory(self, mock_generate, mock_settings, tmp_path):
        mock_generate.return_value = LockFileSuccess(lock_file="x")
        lockgen.main([str(tmp_path), "-q"])
        mock_settings.assert_called_once_with(None, project_dir=str(tmp_path))

    def test_failure_exit_code(self, mock_generate, mock_settings, tmp_path):
        mock_generate.return_value = LockFileFailure(stdout="", stderr="ERR_PNPM")
        assert lockgen.main([str(tmp_path), "-q"]) == 1

    def test_temporary_error_exit_code(self, mock_generate, mock_settings, tmp_path):
        mock_generate.side_effect = TemporaryError(reason="network")
        assert lockgen.main([str(tmp_path), "-q"]) == lockgen.EXIT_TEMPFAIL

    def test_json_output(self, mock_generate, mock_settings, tmp_path, capsys):
        mock_generate.return_value = LockFileSuccess(lock_file="lockfileVersion: '6.0'\n")
        lockgen.main([str(tmp_path), "-q", "--json"])
        assert json.loads(capsys.readouterr().out) == {"error": False, "lock_file": "lockfileVersion: '6.0'\n"}

    def test_missing_directory(self, mock_generate, mock_settings, tmp_path):
        assert lockgen.main([str(tmp_path / "nope"), "-q"]) == 2
        mock_generate.assert_not_called()


def test_bad_config_path(tmp_path):
    assert lockgen.main([str(tmp_path), "-q", "--config", str(tmp_path / "missing.yml")]) == 2


@patch("pnpm_lockgen.config.CONFIG_LOCATIONS", [])
@patch("lockgen.generate_lock_file", return_value=LockFileSuccess(lock_file="x"))
def test_project_config_found_from_other_cwd(mock_generate, tmp_path, monkeypatch):
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".pnpm-lockgen.yml").write_text("version: 1\npost_update:\n  ignore_scripts: true\n")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    assert lockgen.main([str(project), "-q"]) == 0

    config = mock_generate.call_args[0][2]
    assert config.ignore_scripts is True
