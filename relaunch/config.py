"""
Config Layer - Resolved watch settings and the per-directory dot-file.

WatchConfig is built once from parsed arguments and never mutated.
The dot-file stores an argument list so a later run with no
arguments can pick it up again.
"""

from __future__ import annotations

import os
import re
import signal
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from .core.util import read_json, write_json


CONFIG_FILENAME = ".relaunch.json"
DEFAULT_SHELL = "/bin/sh"
DEFAULT_THROTTLE = 1


class ConfigError(Exception):
    """Exception raised for unusable configuration values."""
    pass


@dataclass(frozen=True)
class WatchConfig:
    """Settings for one watch session."""
    root: str
    command: Tuple[str, ...]
    include: Tuple[Pattern[str], ...] = ()
    exclude: Tuple[Pattern[str], ...] = ()
    vcs_ignore: bool = True
    throttle: float = DEFAULT_THROTTLE
    run_at_least_once: bool = True
    kill_signal: Optional[signal.Signals] = signal.SIGTERM
    process_group: bool = False
    clear_screen: bool = False
    marker: Optional[str] = None
    verbose: bool = False
    quiet: bool = False
    cleanup: Optional[str] = None
    use_shell: bool = False
    shell: str = field(default_factory=lambda: os.environ.get("SHELL") or DEFAULT_SHELL)
    append_path: bool = False


def parse_signal(value: str) -> Optional[signal.Signals]:
    """Resolve ``TERM``, ``SIGTERM`` or ``15`` to a signal; empty disables.

    Raises:
        ConfigError: If the name or number is not a known signal
    """
    text = value.strip()
    if not text:
        return None
    if text.isdigit():
        try:
            return signal.Signals(int(text))
        except ValueError:
            raise ConfigError(f"unknown signal number: {text}")
    name = text.upper()
    if not name.startswith("SIG"):
        name = "SIG" + name
    try:
        return signal.Signals[name]
    except KeyError:
        raise ConfigError(f"unknown signal: {value}")


def compile_pattern(value: str) -> Pattern[str]:
    try:
        return re.compile(value)
    except re.error as e:
        raise ConfigError(f"invalid regex {value!r}: {e}")


def config_path(directory: Optional[str] = None) -> str:
    return os.path.join(directory or os.getcwd(), CONFIG_FILENAME)


def load_saved_args(directory: Optional[str] = None) -> Optional[List[str]]:
    """Return the argument list stored in the dot-file, if there is one.

    Raises:
        ConfigError: If the file exists but does not hold a list of strings
    """
    path = config_path(directory)
    try:
        data = read_json(path)
    except ValueError as e:
        raise ConfigError(f"cannot read {path}: {e}")
    if data is None:
        return None
    args = data.get("args") if isinstance(data, dict) else None
    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        raise ConfigError(f"malformed config file: {path}")
    return args


def save_args(args: List[str], directory: Optional[str] = None) -> str:
    path = config_path(directory)
    write_json(path, {"args": list(args)})
    return path
