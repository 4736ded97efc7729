from __future__ import annotations

import argparse
import os
import shutil
import signal
import sys
import threading
from typing import Callable, Dict, List, Optional

from relaunch import config as config_mod
from relaunch.config import ConfigError, WatchConfig
from relaunch.core import git as git_mod
from relaunch.core import term
from relaunch.core.util import shell_line
from relaunch.scheduler import DebounceScheduler
from relaunch.supervisor import ProcessSupervisor, SpawnError
from relaunch.watcher import EventSource, WatchError


VERSION = "relaunch 0.1.0"
EXIT_MISSING_COMMAND = 1
EXIT_WATCH_FAILED = 2
EXIT_SPAWN_FAILED = 2
SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")
WRITE_CONFIG_FLAGS = ("-w", "--write-config")


def _die(msg: str, code: int = 1) -> None:
    print(msg, file=sys.stderr)
    sys.exit(code)


def _info(cfg: WatchConfig, msg: str) -> None:
    if not cfg.quiet:
        print(msg, file=sys.stderr)


def _signal_arg(value: str):
    try:
        return config_mod.parse_signal(value)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def _regex_arg(value: str):
    try:
        return config_mod.compile_pattern(value)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relaunch",
        description="Run COMMAND, and run it again whenever files under DIRECTORY change.",
    )
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument("-c", "--clear", action="store_true", help="clear the screen before each run")
    parser.add_argument(
        "-k", "--kill-signal", type=_signal_arg, default=config_mod.parse_signal("TERM"),
        help="signal sent to the command before restarting (empty disables)",
    )
    parser.add_argument("--no-vcs-ignore", action="store_true", help="do not skip .git and git-ignored files")
    parser.add_argument(
        "-i", "--ignore", action="append", type=_regex_arg, default=[], metavar="REGEX",
        help="skip paths matching REGEX (repeatable)",
    )
    parser.add_argument("-n", "--run-only-on-change", action="store_true", help="do not run once at startup")
    parser.add_argument("-q", "--quiet", action="store_true", help="suppress informational messages")
    parser.add_argument(
        "-r", "--regex", action="append", type=_regex_arg, default=[], metavar="REGEX",
        help="only react to paths matching REGEX (repeatable)",
    )
    parser.add_argument(
        "-g", "--use-process-groups", action="store_true",
        help="run the command in its own process group and signal the whole group",
    )
    parser.add_argument(
        "-t", "--throttle", type=int, default=config_mod.DEFAULT_THROTTLE, metavar="SECONDS",
        help="minimum seconds between restarts",
    )
    parser.add_argument("-u", "--clean-up", default=None, metavar="COMMAND", help="run after killing the command")
    parser.add_argument("-v", "--verbose", action="store_true", help="print the path that triggered each run")
    parser.add_argument("-m", "--marker", default=None, metavar="TEXT", help="print TEXT before each run")
    parser.add_argument(
        "-s", "--shell", action="store_true",
        help="run the command through $SHELL -c (command words are passed as shell source, unquoted)",
    )
    parser.add_argument(
        "-p", "--append-path", action="store_true",
        help="pass the changed path to the command as its last argument",
    )
    parser.add_argument(
        "-w", "--write-config", action="store_true",
        help=f"save these arguments to {config_mod.CONFIG_FILENAME} for later runs",
    )
    parser.add_argument("directory", nargs="?", help="directory to watch")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command and arguments to run")
    return parser


def config_from_args(args: argparse.Namespace) -> WatchConfig:
    if args.throttle < 0:
        raise ConfigError("throttle must not be negative")
    return WatchConfig(
        root=os.path.abspath(args.directory),
        command=tuple(args.command),
        include=tuple(args.regex),
        exclude=tuple(args.ignore),
        vcs_ignore=not args.no_vcs_ignore,
        throttle=args.throttle,
        run_at_least_once=not args.run_only_on_change,
        kill_signal=args.kill_signal,
        process_group=args.use_process_groups,
        clear_screen=args.clear,
        marker=args.marker,
        verbose=args.verbose,
        quiet=args.quiet,
        cleanup=args.clean_up or None,
        use_shell=args.shell,
        append_path=args.append_path,
    )


def _args_to_save(argv: List[str], args: argparse.Namespace) -> List[str]:
    # Only drop the flag from the option part, never from the command
    split = len(argv) - len(args.command)
    options = [a for a in argv[:split] if a not in WRITE_CONFIG_FLAGS]
    return options + argv[split:]


def _resolve_argv(argv: Optional[List[str]]) -> List[str]:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv:
        return argv
    try:
        saved = config_mod.load_saved_args()
    except ConfigError as exc:
        _die(str(exc))
    if not saved:
        _die(f"command required (and no {config_mod.CONFIG_FILENAME} here)", EXIT_MISSING_COMMAND)
    return saved


def _check_command(cfg: WatchConfig) -> None:
    if not cfg.command:
        _die("command required", EXIT_MISSING_COMMAND)
    if not cfg.use_shell and shutil.which(cfg.command[0]) is None:
        _die(f"command not found: {cfg.command[0]}", EXIT_MISSING_COMMAND)


def _install_signal_handlers(cancel: threading.Event) -> Dict[int, object]:
    """Route termination signals to ``cancel``; returns the previous handlers."""
    def handler(signum, _frame) -> None:
        cancel.set()

    previous = {}
    for name in SHUTDOWN_SIGNALS:
        sig = getattr(signal, name, None)
        if sig is not None:
            previous[sig] = signal.signal(sig, handler)
    return previous


def _restore_signals(previous: Dict[int, object]) -> None:
    for sig, old in previous.items():
        signal.signal(sig, old)


def _ignore_signals() -> None:
    for name in SHUTDOWN_SIGNALS:
        sig = getattr(signal, name, None)
        if sig is not None:
            signal.signal(sig, signal.SIG_IGN)


def _shutdown(
    supervisor: ProcessSupervisor,
    source: EventSource,
    restore_terminal: Callable[[], None],
) -> None:
    _ignore_signals()
    supervisor.shutdown()
    source.close()
    restore_terminal()


def main(argv: Optional[List[str]] = None) -> None:
    argv = _resolve_argv(argv)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.directory is None:
        parser.print_usage(sys.stderr)
        _die("directory and command required", EXIT_MISSING_COMMAND)

    try:
        cfg = config_from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))
    _check_command(cfg)

    if args.write_config:
        path = config_mod.save_args(_args_to_save(argv, args))
        _info(cfg, f"saved arguments to {path}")

    restore_terminal = term.save_terminal()
    cancel = threading.Event()
    previous_handlers = _install_signal_handlers(cancel)
    source = EventSource(cfg.root, cancel)
    try:
        source.start()
    except WatchError as exc:
        _restore_signals(previous_handlers)
        _die(str(exc), EXIT_WATCH_FAILED)

    supervisor = ProcessSupervisor(cfg, cancel)
    is_ignored = git_mod.ignore_checker(cfg.root) if cfg.vcs_ignore else None

    _info(cfg, f"watching {source.root}, running: {shell_line(cfg.command)}")
    _info(cfg, "Press Ctrl+C to stop...")

    scheduler = DebounceScheduler(cfg, source, supervisor, cancel, is_ignored=is_ignored)
    code = 0
    try:
        scheduler.run()
    except SpawnError as exc:
        print(str(exc), file=sys.stderr)
        code = EXIT_SPAWN_FAILED
    finally:
        _shutdown(supervisor, source, restore_terminal)
    sys.exit(code)


if __name__ == "__main__":
    main()
