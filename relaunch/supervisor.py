"""
Supervisor Layer - Lifecycle of the watched command.

Owns the single child process: spawning it (directly, through a shell,
or as a new session leader), signalling it, running the clean-up
command and reaping it before the next run is allowed to start.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
import threading
import time
from typing import List, Optional, Sequence

from .config import WatchConfig
from .core.util import shell_line


WAIT_POLL = 0.1


class SpawnError(Exception):
    """Exception raised when the command cannot be started."""
    pass


class ProcessSupervisor:
    """Start, stop and reap the configured command, one instance at a time."""

    def __init__(self, cfg: WatchConfig, cancel: Optional[threading.Event] = None):
        self.cfg = cfg
        self.cancel = cancel or threading.Event()
        self.process: Optional[subprocess.Popen] = None
        self.started_at: Optional[float] = None
        self._shut_down = False
        self._stopped = False

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    def build_argv(self, extra_args: Sequence[str] = ()) -> List[str]:
        if self.cfg.use_shell:
            # command words are shell source; only the extra arguments are quoted
            line = " ".join(self.cfg.command)
            if extra_args:
                line = f"{line} {shell_line(extra_args)}"
            return [self.cfg.shell, "-c", line]
        return list(self.cfg.command) + list(extra_args)

    def start(self, extra_args: Sequence[str] = ()) -> subprocess.Popen:
        """Spawn the command and track it as the current process.

        Raises:
            SpawnError: If the program cannot be executed
        """
        argv = self.build_argv(extra_args)
        try:
            proc = subprocess.Popen(argv, start_new_session=self.cfg.process_group)
        except OSError as e:
            raise SpawnError(f"cannot run {shell_line(argv)}: {e}")
        self.process = proc
        self.started_at = time.monotonic()
        self._stopped = False
        return proc

    def stop_current(self) -> bool:
        """Signal, clean up after and reap the current process.

        Returns:
            bool: False if cancellation interrupted the wait, so the
            process is still tracked for ``shutdown``
        """
        proc = self.process
        if proc is None:
            return True

        try:
            self._signal(proc)
        except ProcessLookupError:
            pass
        self.run_cleanup()
        self._stopped = True

        if not self._wait(proc):
            return False
        self.process = None
        self.started_at = None
        return True

    def shutdown(self) -> bool:
        """Kill the current process and run the clean-up, once.

        Later calls do nothing. Failures are swallowed since the
        program is about to exit anyway.

        Returns:
            bool: True if this call did the work
        """
        if self._shut_down:
            return False
        self._shut_down = True

        # stop_current already signalled and cleaned up after this process
        if not self._stopped:
            proc = self.process
            if proc is not None:
                try:
                    self._signal(proc)
                except OSError:
                    pass
            try:
                self.run_cleanup()
            except Exception as e:
                print(f"clean-up failed: {e}", file=sys.stderr)
        self.process = None
        self.started_at = None
        return True

    def run_cleanup(self) -> Optional[int]:
        """Run the clean-up command synchronously; its status is informational."""
        cleanup = self.cfg.cleanup
        if not cleanup:
            return None
        if self.cfg.use_shell:
            argv = [self.cfg.shell, "-c", cleanup]
        else:
            argv = shlex.split(cleanup)
        try:
            return subprocess.call(argv)
        except OSError as e:
            print(f"clean-up command failed: {e}", file=sys.stderr)
            return None

    def _signal(self, proc: subprocess.Popen) -> None:
        sig = self.cfg.kill_signal
        if sig is None:
            return
        if self.cfg.process_group:
            os.killpg(proc.pid, sig)
        else:
            proc.send_signal(sig)

    def _wait(self, proc: subprocess.Popen) -> bool:
        while True:
            try:
                proc.wait(timeout=WAIT_POLL)
                return True
            except subprocess.TimeoutExpired:
                if self.cancel.is_set():
                    return False
