"""Shared fixtures for relaunch tests."""

import re
import shlex
import sys

import pytest

from relaunch.config import WatchConfig


@pytest.fixture
def make_config(tmp_path):
    """Build a WatchConfig rooted at tmp_path with test-friendly defaults."""

    def _make(**overrides):
        include = overrides.pop("include", ())
        exclude = overrides.pop("exclude", ())
        values = {
            "root": str(tmp_path),
            "command": (sys.executable, "-c", "pass"),
            "include": tuple(re.compile(p) for p in include),
            "exclude": tuple(re.compile(p) for p in exclude),
            "throttle": 0,
            "quiet": True,
            "shell": "/bin/sh",
        }
        values.update(overrides)
        return WatchConfig(**values)

    return _make


@pytest.fixture
def counter_command(tmp_path):
    """A shell-safe command line that appends one line to a file per run."""
    log = tmp_path / "cleanup.log"
    code = f"open({str(log)!r}, 'a').write('x\\n')"
    command = f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"

    def count():
        if not log.exists():
            return 0
        return len(log.read_text().splitlines())

    return command, count
