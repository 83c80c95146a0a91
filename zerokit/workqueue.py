"""Queues of deferred work and the worker threads that run it."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = ["Tasklet", "WorkQueue"]

_IDLE_WAIT = 0.05


@dataclass
class Tasklet:
    """A function to run later, with data kept alongside it."""

    function: Callable[[], object]
    data: Any = None

    def run(self) -> object:
        """Call the function."""
        return self.function()


class WorkQueue:
    """Tasklets taken most recently added first."""

    def __init__(self) -> None:
        self._tasklets: deque[Tasklet] = deque()
        self._ready = threading.Condition()

    def add(self, tasklet: Tasklet) -> None:
        """Put ``tasklet`` at the front of the queue."""
        with self._ready:
            self._tasklets.appendleft(tasklet)
            self._ready.notify()

    def get(self) -> Tasklet | None:
        """Remove and return the front tasklet, or None if the queue is empty."""
        with self._ready:
            return self._tasklets.popleft() if self._tasklets else None

    def __len__(self) -> int:
        with self._ready:
            return len(self._tasklets)

    def worker(self, stop: threading.Event) -> int:
        """Run tasklets until ``stop`` is set; return how many were run."""
        count = 0
        while not stop.is_set():
            tasklet = self.get()
            if tasklet is None:
                with self._ready:
                    self._ready.wait_for(
                        lambda: bool(self._tasklets) or stop.is_set(), _IDLE_WAIT
                    )
                continue
            tasklet.run()
            count += 1
        return count

    def spawn_worker(self, stop: threading.Event) -> threading.Thread:
        """Start a daemon thread running :meth:`worker` and return it."""
        thread = threading.Thread(target=self.worker, args=(stop,), daemon=True)
        thread.start()
        return thread