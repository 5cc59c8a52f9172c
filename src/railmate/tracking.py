"""Simulated live tracking of a train along its interpolated route."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import DEFAULT_TRACKING_INTERVAL
from .errors import TrackingError
from .models import RoutePoint, Train
from .routes import generate_route
from .scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    TRACKING = "tracking"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TrackingUpdate:
    """Snapshot published to listeners after every state change."""
    train_number: Optional[str]
    index: int
    position: Optional[RoutePoint]
    remaining_seconds: float
    state: TrackingState


def format_remaining(seconds: float) -> str:
    """Format a duration in seconds as MM:SS."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


class TrackingAnimator:
    """
    Replays a generated route on a fixed cadence.

    State machine:
        IDLE --load()--> READY --start()--> TRACKING --last point / stop()--> STOPPED
        STOPPED --restart()--> READY, any --reset()--> IDLE

    Only one step is ever scheduled at a time and the next one is scheduled
    after the current one has completed, so the position always advances
    monotonically through the route.
    """

    def __init__(self, scheduler: Scheduler, interval: float = DEFAULT_TRACKING_INTERVAL):
        """
        Args:
            scheduler: Clock used for step scheduling.
            interval: Seconds between route points.
        """
        if interval <= 0:
            raise ValueError("Tracking interval must be positive")
        self.scheduler = scheduler
        self.interval = interval

        self._lock = threading.RLock()
        self._listeners: List[Callable[[TrackingUpdate], None]] = []
        self._state = TrackingState.IDLE
        self._train: Optional[Train] = None
        self._route: Tuple[RoutePoint, ...] = ()
        self._index = 0
        self._remaining = 0.0
        self._pending: Optional[ScheduledTask] = None
        self._generation = 0  # Bumped whenever scheduled steps must be invalidated

    # ------------------ observation -----------------

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def train(self) -> Optional[Train]:
        return self._train

    @property
    def route(self) -> Tuple[RoutePoint, ...]:
        return self._route

    @property
    def index(self) -> int:
        return self._index

    @property
    def position(self) -> Optional[RoutePoint]:
        return self._route[self._index] if self._route else None

    @property
    def remaining_seconds(self) -> float:
        return self._remaining

    @property
    def pending_step(self) -> Optional[ScheduledTask]:
        """The next scheduled step, if any."""
        task = self._pending
        return task if task is not None and task.pending else None

    def add_listener(self, listener: Callable[[TrackingUpdate], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[TrackingUpdate], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> TrackingUpdate:
        return TrackingUpdate(
            train_number=self._train.number if self._train else None,
            index=self._index,
            position=self.position,
            remaining_seconds=self._remaining,
            state=self._state,
        )

    # ------------------ commands -----------------

    def load(self, train: Train) -> None:
        """Generate the route for a train and move to READY at its first point."""
        with self._lock:
            self._cancel_pending()
            self._train = train
            self._route = tuple(generate_route(train))
            self._index = 0
            self._remaining = self._remaining_for(0)
            self._state = TrackingState.READY
            logger.info(f"Loaded train {train.number} with {len(self._route)} route points")
            update = self.snapshot()
        self._publish(update)

    def start(self) -> None:
        """Begin stepping through the route."""
        with self._lock:
            if self._state == TrackingState.TRACKING:
                return
            if self._state == TrackingState.IDLE:
                raise TrackingError("No train loaded")
            if self._state == TrackingState.STOPPED:
                raise TrackingError("Tracking has stopped; restart() to replay the route")
            self._state = TrackingState.TRACKING
            self._schedule_next()
            logger.info(f"Started tracking train {self._train.number}")
            update = self.snapshot()
        self._publish(update)

    def step(self) -> bool:
        """
        Advance one route point.

        Returns:
            False if not tracking, True otherwise.
        """
        return self._advance(None)

    def stop(self) -> bool:
        """
        Stop tracking; no scheduled step runs afterwards.

        Returns:
            True if tracking was in progress.
        """
        with self._lock:
            self._cancel_pending()
            if self._state != TrackingState.TRACKING:
                return False
            self._state = TrackingState.STOPPED
            logger.info(f"Stopped tracking train {self._train.number} at point {self._index}")
            update = self.snapshot()
        self._publish(update)
        return True

    def restart(self) -> None:
        """Rewind the current route to its first point (READY)."""
        with self._lock:
            if self._train is None:
                raise TrackingError("No train loaded")
            self._cancel_pending()
            self._index = 0
            self._remaining = self._remaining_for(0)
            self._state = TrackingState.READY
            update = self.snapshot()
        self._publish(update)

    def reset(self) -> None:
        """Forget the loaded train (IDLE)."""
        with self._lock:
            self._cancel_pending()
            self._train = None
            self._route = ()
            self._index = 0
            self._remaining = 0.0
            self._state = TrackingState.IDLE

    def close(self) -> None:
        """Cancel any outstanding step, e.g. when the view goes away."""
        self.stop()

    # ------------------ internals -----------------

    def _advance(self, generation: Optional[int]) -> bool:
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Discarding stale tracking step")
                return False
            if self._state != TrackingState.TRACKING:
                return False
            self._cancel_pending()

            self._index += 1
            self._remaining = self._remaining_for(self._index)
            logger.debug(f"Train {self._train.number} at point {self._index}/{len(self._route) - 1}")

            if self._index >= len(self._route) - 1:
                self._index = len(self._route) - 1
                self._remaining = 0.0
                self._state = TrackingState.STOPPED
                logger.info(f"Train {self._train.number} reached {self._train.destination.name}")
            else:
                self._schedule_next()
            update = self.snapshot()
        self._publish(update)
        return True

    def _remaining_for(self, index: int) -> float:
        return max(0.0, (len(self._route) - 1 - index) * self.interval)

    def _schedule_next(self) -> None:
        self._pending = self.scheduler.call_later(self.interval, self._on_tick, self._generation)

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_tick(self, generation: int) -> None:
        self._advance(generation)

    def _publish(self, update: TrackingUpdate) -> None:
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception as e:
                logger.warning(f"Tracking listener failed: {e}")
