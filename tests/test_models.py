"""
Tests for data types and error classification (pnpm_lockgen/models.py, errors.py).
"""

import pytest

from pnpm_lockgen.errors import (
    TEMPORARY_ERROR,
    ExecError,
    LockGenError,
    TemporaryError,
    is_temporary_error,
)
from pnpm_lockgen.models import (
    ExecOptions,
    LockFileFailure,
    LockFileSuccess,
    PostUpdateConfig,
    ToolConstraint,
    Upgrade,
)


class TestUpgrade:

    def test_from_dict_camel_case(self):
        upgrade = Upgrade.from_dict({"depName": "pnpm", "newVersion": "8.6.0", "isLockFileMaintenance": False})
        assert upgrade == Upgrade(dep_name="pnpm", new_version="8.6.0")

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Upgrade().dep_name = "x"


class TestPostUpdateConfig:

    def test_options_normalized_to_frozenset(self):
        config = PostUpdateConfig(post_update_options=["pnpmDedupe", "pnpmDedupe"])
        assert config.post_update_options == frozenset({"pnpmDedupe"})

    def test_string_options_rejected(self):
        with pytest.raises(ValueError, match="post_update_options"):
            PostUpdateConfig(post_update_options="pnpmDedupe")

    def test_from_dict_single_option_string(self):
        config = PostUpdateConfig.from_dict({"post_update_options": "pnpmDedupe"})
        assert config.post_update_options == frozenset({"pnpmDedupe"})

    def test_from_dict_rejects_mapping_options(self):
        with pytest.raises(ValueError, match="post_update_options"):
            PostUpdateConfig.from_dict({"post_update_options": {"pnpmDedupe": True}})

    def test_to_dict(self):
        config = PostUpdateConfig(constraints={"pnpm": "^8"}, post_update_options={"pnpmDedupe"})
        assert config.to_dict() == {
            "constraints": {"pnpm": "^8"},
            "post_update_options": ["pnpmDedupe"],
            "ignore_scripts": False,
        }


class TestExecOptions:

    def test_cwd_from_file(self):
        options = ExecOptions(cwd_file="/work/app/pnpm-lock.yaml")
        assert options.cwd == "/work/app"

    def test_to_dict(self):
        options = ExecOptions(cwd_file="a/pnpm-lock.yaml", tool_constraints=(ToolConstraint("pnpm", "<7"),))
        assert options.to_dict()["tool_constraints"] == [{"tool_name": "pnpm", "constraint": "<7"}]


class TestResults:

    def test_success(self):
        result = LockFileSuccess(lock_file="content")
        assert result.error is False
        assert result.to_dict() == {"error": False, "lock_file": "content"}

    def test_failure(self):
        result = LockFileFailure(stdout="o", stderr="e")
        assert result.error is True
        assert result.to_dict() == {"error": True, "stdout": "o", "stderr": "e"}


class TestErrors:

    def test_temporary_error_message_is_sentinel(self):
        err = TemporaryError(reason="registry unreachable")
        assert str(err) == TEMPORARY_ERROR
        assert err.retryable is True
        assert err.reason == "registry unreachable"

    def test_exec_error_fields(self):
        err = ExecError("failed", cmd="pnpm dedupe", stdout="o", stderr="e", exit_code=1, step_index=1)
        assert isinstance(err, LockGenError)
        assert err.retryable is False
        assert (err.cmd, err.stdout, err.stderr, err.exit_code, err.step_index) == ("pnpm dedupe", "o", "e", 1, 1)

    def test_is_temporary_error(self):
        assert is_temporary_error(TemporaryError()) is True
        assert is_temporary_error(RuntimeError(TEMPORARY_ERROR)) is True
        assert is_temporary_error(LockGenError(TEMPORARY_ERROR)) is True
        assert is_temporary_error(RuntimeError("temporary-error: docker")) is False
        assert is_temporary_error(ExecError("failed", cmd="pnpm install")) is False
