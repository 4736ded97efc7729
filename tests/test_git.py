"""Tests for the git ignore delegate."""

import shutil
import subprocess

import pytest

from relaunch.core import git as git_mod


pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def repo(tmp_path):
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    (tmp_path / ".gitignore").write_text("*.log\nbuild/\n")
    return tmp_path


class TestIgnoreChecker:
    """git check-ignore wrapper."""

    def test_outside_repository(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
        assert git_mod.ignore_checker(str(tmp_path)) is None

    def test_ignored_paths(self, repo):
        is_ignored = git_mod.ignore_checker(str(repo))
        assert is_ignored is not None
        assert is_ignored("debug.log") is True
        assert is_ignored("build/out.o") is True
        assert is_ignored("main.py") is False

    def test_watch_root_below_repo_root(self, repo):
        sub = repo / "src"
        sub.mkdir()
        is_ignored = git_mod.ignore_checker(str(sub))
        assert is_ignored("trace.log") is True
        assert is_ignored("main.py") is False

    def test_missing_git_counts_as_not_ignored(self, repo, monkeypatch):
        monkeypatch.setenv("PATH", "")
        assert git_mod.check_ignore(str(repo), "debug.log") is False
