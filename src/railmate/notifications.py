"""Best-effort notification delivery for destination alerts."""

import logging
from typing import List, Sequence

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"
PERMISSION_DEFAULT = "default"

# Vibration pattern in milliseconds: on, off, on
VIBRATION_PATTERN = (500, 200, 500)

ALERT_SOUND = "notification-sound.mp3"


class Notifier:
    """
    Notification surface used by the alert timer.

    Subclasses override the show/play/vibrate hooks. notify() never raises:
    every hook failure is logged and the remaining hooks still run.
    """

    def __init__(self, permission: str = PERMISSION_DEFAULT):
        self.permission = permission

    def request_permission(self) -> str:
        """Ask for permission to display notifications; returns the new state."""
        if self.permission == PERMISSION_DEFAULT:
            self.permission = PERMISSION_GRANTED
        return self.permission

    def notify(self, title: str, body: str) -> bool:
        """
        Display a notification, play the alert sound and vibrate.

        Returns:
            True if the notification was displayed.
        """
        if self.permission == PERMISSION_DEFAULT:
            try:
                self.request_permission()
            except Exception as e:
                logger.warning(f"Notification permission request failed: {e}")

        if self.permission != PERMISSION_GRANTED:
            logger.warning(f"Notification permission {self.permission}; skipping '{title}'")
            return False

        try:
            self.show(title, body)
        except Exception as e:
            logger.error(f"Failed to display notification: {e}")
            return False

        try:
            self.play_sound()
        except Exception as e:
            logger.error(f"Error playing notification sound: {e}")

        try:
            self.vibrate(VIBRATION_PATTERN)
        except Exception as e:
            logger.warning(f"Vibration failed: {e}")

        return True

    def show(self, title: str, body: str) -> None:
        logger.info(f"Notification display not supported; {title}: {body}")

    def play_sound(self) -> None:
        pass

    def vibrate(self, pattern: Sequence[int]) -> None:
        logger.warning("Vibration not supported on this device")


class LoggingNotifier(Notifier):
    """Delivers notifications to the log; used when no platform surface exists."""

    def __init__(self, permission: str = PERMISSION_GRANTED):
        super().__init__(permission)

    def show(self, title: str, body: str) -> None:
        logger.info(f"NOTIFICATION {title}: {body}")

    def play_sound(self) -> None:
        logger.debug(f"Playing {ALERT_SOUND}")

    def vibrate(self, pattern: Sequence[int]) -> None:
        logger.debug(f"Vibrating {list(pattern)}")


class RecordingNotifier(Notifier):
    """Keeps delivered notifications in memory."""

    def __init__(self, permission: str = PERMISSION_GRANTED):
        super().__init__(permission)
        self.delivered: List[tuple] = []
        self.sounds = 0
        self.vibrations: List[tuple] = []

    def show(self, title: str, body: str) -> None:
        self.delivered.append((title, body))

    def play_sound(self) -> None:
        self.sounds += 1

    def vibrate(self, pattern: Sequence[int]) -> None:
        self.vibrations.append(tuple(pattern))
