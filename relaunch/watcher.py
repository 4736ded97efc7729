"""
Watcher Layer - Filesystem monitoring.

Wraps a watchdog observer in an endless iterator of changed paths.
The observer thread only enqueues; the control loop pulls paths one
at a time and can flush whatever piled up in between.
"""

from __future__ import annotations

import os
import queue
import threading
from pathlib import Path
from typing import Iterator, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


RELEVANT_EVENTS = {"created", "modified", "moved", "deleted"}
POLL_INTERVAL = 0.2


class WatchError(Exception):
    """Exception raised when the filesystem watch cannot be established."""
    pass


class ChangeQueueHandler(FileSystemEventHandler):
    """Push relevant event paths, relative to ``root``, onto a queue."""

    def __init__(self, root: str, changes: "queue.Queue[str]"):
        super().__init__()
        self.root = root
        self.changes = changes

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in RELEVANT_EVENTS:
            return
        # A directory's mtime moves whenever an entry inside it changes
        if event.is_directory and event.event_type == "modified":
            return
        path = event.dest_path if event.event_type == "moved" else event.src_path
        self.changes.put(self.relative(path))

    def relative(self, path) -> str:
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        try:
            rel = os.path.relpath(path, self.root)
        except ValueError:
            return path
        if rel == os.pardir or rel.startswith(os.pardir + os.sep):
            return path
        return rel.replace(os.sep, "/")


class EventSource:
    """Endless, non-restartable stream of changed paths under a root.

    Iteration blocks until a change arrives. It stops only after
    ``cancel`` is set or ``close()`` has been called.
    """

    def __init__(self, root: str, cancel: Optional[threading.Event] = None):
        self.root = str(Path(root).resolve())
        self.cancel = cancel or threading.Event()
        self.changes: "queue.Queue[str]" = queue.Queue()
        self.handler = ChangeQueueHandler(self.root, self.changes)
        self.observer: Optional[Observer] = None

    def start(self) -> "EventSource":
        """Schedule the recursive watch and start the observer thread.

        Raises:
            WatchError: If the root is unusable or the watch cannot be set up
        """
        watch_path = Path(self.root)
        if not watch_path.exists():
            raise WatchError(f"Path does not exist: {watch_path}")
        if not watch_path.is_dir():
            raise WatchError(f"Path is not a directory: {watch_path}")

        observer = Observer()
        try:
            observer.schedule(self.handler, self.root, recursive=True)
            observer.start()
        except Exception as e:
            raise WatchError(f"Failed to start filesystem watching: {e}")
        self.observer = observer
        return self

    def close(self) -> None:
        self.cancel.set()
        if self.observer is not None:
            self.observer.stop()
            if self.observer.is_alive():
                self.observer.join()
            self.observer = None

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while not self.cancel.is_set():
            try:
                return self.changes.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
        raise StopIteration

    def drain(self) -> List[str]:
        """Remove and return everything queued right now, without blocking."""
        drained = []
        while True:
            try:
                drained.append(self.changes.get_nowait())
            except queue.Empty:
                return drained
