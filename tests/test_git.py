"""Tests for specgate.lib.git module."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from specgate.lib.git import GitResult, remote_url, run_git


def completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestGitResult:
    """Test GitResult dataclass."""

    def test_success(self):
        assert GitResult(0, "", "").success is True
        assert GitResult(1, "", "").success is False
        assert GitResult(0, "", "", timed_out=True).success is False


class TestRunGit:
    """Test run_git function."""

    def test_runs_in_directory(self):
        with patch("specgate.lib.git.subprocess.run", return_value=completed(stdout="ok\n")) as mock_run:
            result = run_git(["status"], Path("/repo"))

        assert result.success
        assert result.stdout == "ok\n"
        assert mock_run.call_args[0][0] == ["git", "-C", "/repo", "status"]

    def test_timeout(self):
        with patch("specgate.lib.git.subprocess.run", side_effect=subprocess.TimeoutExpired("git", 10)):
            result = run_git(["status"], Path("/repo"))

        assert result.timed_out is True
        assert not result.success

    def test_git_not_installed(self):
        with patch("specgate.lib.git.subprocess.run", side_effect=FileNotFoundError("git")):
            result = run_git(["status"], Path("/repo"))

        assert not result.success
        assert "git not found" in result.stderr


class TestRemoteUrl:
    """Test remote_url function."""

    def test_origin(self):
        with patch("specgate.lib.git.subprocess.run", return_value=completed(stdout="git@github.com:acme/board.git\n")):
            assert remote_url(Path("/repo")) == "git@github.com:acme/board.git"

    def test_no_remote(self):
        failed = completed(returncode=2, stderr="error: No such remote 'origin'")
        with patch("specgate.lib.git.subprocess.run", return_value=failed):
            assert remote_url(Path("/repo")) is None

    def test_not_a_repo(self, tmp_path):
        failed = completed(returncode=128, stderr="fatal: not a git repository")
        with patch("specgate.lib.git.subprocess.run", return_value=failed):
            assert remote_url(tmp_path) is None
