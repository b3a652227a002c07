"""Tests for the git command runner."""

import shutil
import subprocess

import pytest

from ref_graph.utils.git_runner import (
    get_git_environment,
    is_git_repository,
    run_git_command,
)

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


class TestGitEnvironment:
    def test_safe_directory_is_first_entry(self, tmp_path, monkeypatch):
        for key in ("GIT_CONFIG_COUNT", "GIT_CONFIG_KEY_0", "GIT_CONFIG_VALUE_0"):
            monkeypatch.delenv(key, raising=False)

        env = get_git_environment(tmp_path)

        assert env["GIT_CONFIG_COUNT"] == "1"
        assert env["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert env["GIT_CONFIG_VALUE_0"] == str(tmp_path.resolve())

    def test_existing_entries_are_shifted(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GIT_CONFIG_COUNT", "2")
        monkeypatch.setenv("GIT_CONFIG_KEY_0", "core.abbrev")
        monkeypatch.setenv("GIT_CONFIG_VALUE_0", "12")
        monkeypatch.setenv("GIT_CONFIG_KEY_1", "log.showSignature")
        monkeypatch.setenv("GIT_CONFIG_VALUE_1", "false")

        env = get_git_environment(tmp_path)

        assert env["GIT_CONFIG_COUNT"] == "3"
        assert env["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert env["GIT_CONFIG_KEY_1"] == "core.abbrev"
        assert env["GIT_CONFIG_VALUE_1"] == "12"
        assert env["GIT_CONFIG_KEY_2"] == "log.showSignature"
        assert env["GIT_CONFIG_VALUE_2"] == "false"


class TestRunGitCommand:
    def test_rejects_non_git_commands(self, tmp_path):
        with pytest.raises(ValueError):
            run_git_command(["ls"], cwd=tmp_path)

    @requires_git
    def test_failure_raises_called_process_error(self, tmp_path):
        with pytest.raises(subprocess.CalledProcessError):
            run_git_command(["git", "rev-parse", "--git-dir"], cwd=tmp_path)

    @requires_git
    def test_is_git_repository(self, git_repo, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()

        assert is_git_repository(git_repo.path)
        assert not is_git_repository(plain)
        assert not is_git_repository(tmp_path / "missing")
