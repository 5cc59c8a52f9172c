"""Cancelable scheduled tasks on a real or simulated clock."""

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """
    Handle for a callback scheduled to run once.

    The handle is the only way to revoke the callback. Once cancel() has
    returned True the callback is guaranteed never to run.
    """

    def __init__(self, due: float, callback: Callable[..., Any], args: Tuple = ()):
        self.due = due
        self._callback = callback
        self._args = args
        self._lock = threading.Lock()
        self.cancelled = False
        self.fired = False
        self._timer: Optional[threading.Timer] = None

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """
        Revoke the callback.

        Returns:
            True if the callback was prevented, False if it already ran or
            was already cancelled.
        """
        with self._lock:
            if not self.pending:
                return False
            self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
        return True

    def run(self) -> None:
        """Run the callback unless the task was cancelled first."""
        with self._lock:
            if not self.pending:
                return
            self.fired = True
        self._callback(*self._args)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "fired" if self.fired else "pending"
        return f"<ScheduledTask due={self.due:.3f} {state}>"


class Scheduler(ABC):
    """Interface for scheduling single-shot callbacks."""

    @abstractmethod
    def now(self) -> float:
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> ScheduledTask:
        pass

    def shutdown(self) -> None:
        """Cancel everything still pending."""


class ThreadingScheduler(Scheduler):
    """Runs callbacks on daemon threading.Timer threads against the wall clock."""

    def __init__(self):
        self._tasks: List[ScheduledTask] = []
        self._lock = threading.Lock()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> ScheduledTask:
        delay = max(0.0, float(delay))
        task = ScheduledTask(self.now() + delay, callback, args)
        timer = threading.Timer(delay, self._run_task, args=(task,))
        timer.daemon = True
        task._timer = timer

        with self._lock:
            self._tasks = [t for t in self._tasks if t.pending]
            self._tasks.append(task)

        timer.start()
        return task

    @staticmethod
    def _run_task(task: ScheduledTask) -> None:
        try:
            task.run()
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}", exc_info=True)

    def shutdown(self) -> None:
        with self._lock:
            tasks, self._tasks = self._tasks, []
        cancelled = sum(1 for task in tasks if task.cancel())
        if cancelled:
            logger.debug(f"Cancelled {cancelled} pending tasks on shutdown")


class SimulatedScheduler(Scheduler):
    """
    Virtual clock for simulations and tests.

    Nothing runs until advance() or run_until_idle() is called; callbacks
    then run on the caller's thread in due order, ties in scheduling order.
    Callbacks may schedule further tasks, which run in the same advance()
    if they fall due within it.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> ScheduledTask:
        task = ScheduledTask(self._now + max(0.0, float(delay)), callback, args)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if task.pending)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every task that falls due.

        Returns:
            Number of callbacks that ran.
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self._now = due
            if task.pending:
                task.run()
                ran += 1
        self._now = target
        return ran

    def run_until_idle(self, limit: int = 100000) -> int:
        """Run queued tasks until none remain. Returns the number that ran."""
        ran = 0
        while self._queue:
            if ran >= limit:
                raise RuntimeError(f"Scheduler still busy after {limit} callbacks")
            due, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if task.pending:
                task.run()
                ran += 1
        return ran

    def shutdown(self) -> None:
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()
