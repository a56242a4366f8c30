"""
Delayed-task scheduling for the client.

The dashboard never sleeps or blocks; it asks a Scheduler to run a callback
later and keeps the returned DelayedTask so it can cancel it.  Any event
loop can provide a Scheduler: ThreadingScheduler uses threading.Timer, the
Tk GUI wraps ``root.after``, and tests drive a manual clock.
"""

import threading
from collections.abc import Callable
from typing import Protocol


class DelayedTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> DelayedTask: ...


class ThreadingScheduler:
    """Scheduler backed by daemon threading.Timer objects."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> DelayedTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class Debouncer:
    """Owns at most one pending delayed call.

    Each call() cancels the pending task and schedules a new one, so only the
    most recent callback ever runs.  A generation counter guards the window
    where a task has already started firing when it is cancelled.
    """

    def __init__(self, scheduler: Scheduler, delay: float) -> None:
        self._scheduler = scheduler
        self.delay = delay
        self._lock = threading.Lock()
        self._task: DelayedTask | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None

    def call(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._task is not None:
                self._task.cancel()
            self._generation += 1
            generation = self._generation
            self._task = self._scheduler.call_later(
                self.delay, lambda: self._fire(generation, callback)
            )

    def cancel(self) -> None:
        with self._lock:
            if self._task is not None:
                self._task.cancel()
                self._task = None
            self._generation += 1

    def _fire(self, generation: int, callback: Callable[[], None]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._task = None
        callback()
