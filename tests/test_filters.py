"""Unit tests for path filtering."""

import pytest

from relaunch.filters import should_trigger


class TestInitialRun:
    """The empty path stands for the startup run."""

    def test_empty_path_always_triggers(self, make_config):
        cfg = make_config(include=[r"\.go$"], exclude=[".*"])
        assert should_trigger("", cfg, lambda p: True) is True


class TestIncludePatterns:
    """Inclusion list behaviour."""

    def test_no_include_matches_everything(self, make_config):
        assert should_trigger("notes/todo.txt", make_config()) is True

    def test_include_selects_matching_paths(self, make_config):
        cfg = make_config(include=[r"\.go$"])
        assert should_trigger("main.go", cfg) is True
        assert should_trigger("main.txt", cfg) is False

    def test_any_include_pattern_is_enough(self, make_config):
        cfg = make_config(include=[r"\.go$", r"\.mod$"])
        assert should_trigger("go.mod", cfg) is True


class TestVcsIgnore:
    """.git directory and git ignore rules."""

    @pytest.mark.parametrize("path", [".git", ".git/config", "sub/.git/HEAD", "a/b/.git"])
    def test_git_directory_is_skipped(self, make_config, path):
        assert should_trigger(path, make_config()) is False

    def test_gitignore_file_is_not_git_directory(self, make_config):
        assert should_trigger(".gitignore", make_config()) is True

    def test_git_directory_allowed_when_disabled(self, make_config):
        cfg = make_config(vcs_ignore=False)
        assert should_trigger(".git/config", cfg) is True

    def test_delegate_can_reject(self, make_config):
        cfg = make_config()
        assert should_trigger("build/out.o", cfg, lambda p: p.startswith("build/")) is False
        assert should_trigger("src/main.c", cfg, lambda p: p.startswith("build/")) is True

    def test_delegate_not_consulted_when_disabled(self, make_config):
        cfg = make_config(vcs_ignore=False)
        assert should_trigger("build/out.o", cfg, lambda p: True) is True

    def test_failing_delegate_means_not_ignored(self, make_config):
        def broken(path):
            raise OSError("git exploded")

        assert should_trigger("src/main.c", make_config(), broken) is True


class TestExcludePatterns:
    """Exclusion list is applied last."""

    def test_exclude_rejects(self, make_config):
        cfg = make_config(exclude=[r"\.swp$"])
        assert should_trigger("main.go.swp", cfg) is False
        assert should_trigger("main.go", cfg) is True

    def test_exclude_wins_over_include(self, make_config):
        cfg = make_config(include=[r"\.go$"], exclude=[r"_test\.go$"])
        assert should_trigger("x_test.go", cfg) is False


class TestPurity:
    """Same inputs, same answer."""

    def test_repeated_calls_agree(self, make_config):
        cfg = make_config(include=[r"src/"], exclude=[r"\.tmp$"])
        paths = ["src/a.py", "src/a.tmp", "docs/x.md", "", ".git/index"]
        first = [should_trigger(p, cfg) for p in paths]
        for _ in range(3):
            assert [should_trigger(p, cfg) for p in paths] == first
