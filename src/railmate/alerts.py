"""Destination alert timer."""

import logging
import math
import threading
from typing import Callable, Optional

from .config import DEFAULT_COUNTDOWN_TICK, DEFAULT_SECONDS_PER_MINUTE
from .errors import AlertError, AlertValidationError
from .models import AlertSession
from .notifications import LoggingNotifier, Notifier
from .scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class AlertHandle:
    """Cancelable handle for a scheduled destination alert."""

    def __init__(self, task: ScheduledTask, train_number: str, station_name: str):
        self._task = task
        self.train_number = train_number
        self.station_name = station_name

    @property
    def due(self) -> float:
        return self._task.due

    @property
    def fired(self) -> bool:
        return self._task.fired

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled

    @property
    def pending(self) -> bool:
        return self._task.pending

    def cancel(self) -> bool:
        """Cancel before firing. Returns False if it already fired or was cancelled."""
        cancelled = self._task.cancel()
        if cancelled:
            logger.info(f"Cancelled alert for train {self.train_number} at {self.station_name}")
        return cancelled


def setup_alert(
    scheduler: Scheduler,
    train_number: str,
    station_name: str,
    minutes_before: float,
    on_fire: Callable[[], None],
    notifier: Optional[Notifier] = None,
    seconds_per_minute: float = DEFAULT_SECONDS_PER_MINUTE,
) -> AlertHandle:
    """
    Schedule a single-shot destination alert.

    Args:
        scheduler: Clock that runs the alert.
        train_number: Train being watched.
        station_name: Station the passenger wants to be warned about.
        minutes_before: Lead time configured by the passenger.
        on_fire: Invoked after the notification side effects.
        notifier: Notification surface; defaults to logging.
        seconds_per_minute: Multiplier from minutes_before to the delay in seconds.

    Returns:
        AlertHandle that cancels the alert if used before it fires.
    """
    notifier = notifier or LoggingNotifier()
    delay = minutes_before * seconds_per_minute
    logger.info(
        f"Setting up alert for train {train_number} approaching {station_name} "
        f"{minutes_before} minutes before arrival (fires in {delay:g}s)"
    )

    def fire() -> None:
        title = f"Train {train_number} Approaching!"
        body = (
            f"Your train will arrive at {station_name} in approximately "
            f"{minutes_before} minutes. Please get ready."
        )
        try:
            notifier.notify(title, body)
        except Exception as e:
            logger.error(f"Notification delivery failed: {e}")
        on_fire()

    task = scheduler.call_later(delay, fire)
    return AlertHandle(task, train_number, station_name)


class AlertManager:
    """
    Owns the single destination alert of a session.

    Keeps a whole-second countdown for display and refuses to stack a
    second alert while one is active.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        notifier: Optional[Notifier] = None,
        seconds_per_minute: float = DEFAULT_SECONDS_PER_MINUTE,
        countdown_tick: float = DEFAULT_COUNTDOWN_TICK,
    ):
        self.scheduler = scheduler
        self.notifier = notifier or LoggingNotifier()
        self.seconds_per_minute = seconds_per_minute
        self.countdown_tick = countdown_tick

        self._lock = threading.RLock()
        self._session: Optional[AlertSession] = None
        self._countdown_task: Optional[ScheduledTask] = None

    @property
    def active_session(self) -> Optional[AlertSession]:
        session = self._session
        return session if session is not None and session.active else None

    @property
    def last_session(self) -> Optional[AlertSession]:
        return self._session

    def set_alert(
        self,
        train_number: str,
        station_name: str,
        minutes_before: int,
        on_fire: Optional[Callable[[AlertSession], None]] = None,
    ) -> AlertSession:
        """
        Start a destination alert.

        Raises:
            AlertValidationError: If train or station is missing or the lead time is not positive.
            AlertError: If an alert is already active.
        """
        if not train_number or not train_number.strip() or not station_name or not station_name.strip():
            raise AlertValidationError("Please select a train and station")
        if minutes_before <= 0:
            raise AlertValidationError("Alert lead time must be positive")

        with self._lock:
            if self.active_session is not None:
                raise AlertError("An alert is already active; cancel it before setting another")

            delay = minutes_before * self.seconds_per_minute
            session = AlertSession(
                train_number=train_number.strip(),
                station_name=station_name.strip(),
                minutes_before=minutes_before,
                active=True,
                remaining_countdown=int(math.ceil(delay)),
            )
            session.handle = setup_alert(
                self.scheduler,
                session.train_number,
                session.station_name,
                minutes_before,
                lambda: self._on_fire(session, on_fire),
                notifier=self.notifier,
                seconds_per_minute=self.seconds_per_minute,
            )
            self._session = session
            self._schedule_countdown(session)
            return session

    def cancel_alert(self) -> bool:
        """
        Cancel the active alert.

        Returns False if none was active or the alert has already started
        firing, in which case the firing path finishes the session.
        """
        with self._lock:
            session = self.active_session
            if session is None:
                return False
            if not session.handle.cancel():
                logger.info(f"Alert for train {session.train_number} is already firing; not cancelled")
                return False
            self._stop_countdown()
            session.active = False
            session.remaining_countdown = 0
            return True

    def close(self) -> None:
        """Cancel outstanding timers."""
        self.cancel_alert()

    def _on_fire(self, session: AlertSession, callback: Optional[Callable[[AlertSession], None]]) -> None:
        with self._lock:
            if self._session is not session:
                return
            self._stop_countdown()
            session.active = False
            session.remaining_countdown = 0
        logger.info(f"Destination alert fired for train {session.train_number} at {session.station_name}")
        if callback is not None:
            callback(session)

    def _schedule_countdown(self, session: AlertSession) -> None:
        self._countdown_task = self.scheduler.call_later(self.countdown_tick, self._tick, session)

    def _stop_countdown(self) -> None:
        if self._countdown_task is not None:
            self._countdown_task.cancel()
            self._countdown_task = None

    def _tick(self, session: AlertSession) -> None:
        with self._lock:
            if self._session is not session or not session.active:
                return
            session.remaining_countdown = max(0, int(math.ceil(session.handle.due - self.scheduler.now())))
            if session.remaining_countdown > 0:
                self._schedule_countdown(session)
            else:
                self._countdown_task = None
