"""
Scheduler Layer - The restart loop.

Consumes changed paths one at a time, filters them, and for each
relevant change stops the previous run, flushes the backlog, starts
the command again and then waits out the throttle period. Everything
runs on the calling thread; a cancellation event is checked at every
point where the loop can block.
"""

from __future__ import annotations

import itertools
import sys
import threading
from typing import Callable, Iterable, List, Optional

from .config import WatchConfig
from .core import term
from .filters import should_trigger
from .supervisor import ProcessSupervisor, SpawnError


class DebounceScheduler:
    """Drive restarts of the supervised command from a stream of changes."""

    def __init__(
        self,
        cfg: WatchConfig,
        events: Iterable[str],
        supervisor: ProcessSupervisor,
        cancel: Optional[threading.Event] = None,
        is_ignored: Optional[Callable[[str], bool]] = None,
        drain: Optional[Callable[[], List[str]]] = None,
    ):
        self.cfg = cfg
        self.events = events
        self.supervisor = supervisor
        self.cancel = cancel or threading.Event()
        self.is_ignored = is_ignored
        self.drain = drain if drain is not None else getattr(events, "drain", None)
        self.cycles = 0

    def run(self) -> None:
        """Process events until cancelled or the event stream ends.

        Raises:
            SpawnError: If the synthetic initial run cannot be started
        """
        stream: Iterable[str] = self.events
        if self.cfg.run_at_least_once:
            stream = itertools.chain([""], stream)

        for path in stream:
            if self.cancel.is_set():
                return
            if path and not should_trigger(path, self.cfg, self.is_ignored):
                continue
            self.cycle(path)

    def cycle(self, path: str) -> None:
        """One restart: stop, coalesce, announce, start, throttle."""
        if not self.supervisor.stop_current():
            return

        if self.drain is not None:
            self.drain()
        term.drain_input()

        if self.cancel.is_set():
            return

        if self.cfg.clear_screen:
            term.clear_screen()
        if self.cfg.marker:
            print(self.cfg.marker, flush=True)
        if self.cfg.verbose and path:
            print(f"changed: {path}", file=sys.stderr, flush=True)

        extra_args = [path] if self.cfg.append_path and path else []
        try:
            self.supervisor.start(extra_args)
        except SpawnError as e:
            if not path:
                raise
            print(str(e), file=sys.stderr, flush=True)
        self.cycles += 1

        self.cancel.wait(self.cfg.throttle)
