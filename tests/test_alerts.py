"""Tests for destination alerts."""

import sys
import threading
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path so we can import railmate
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from railmate.alerts import AlertManager, setup_alert
from railmate.errors import AlertError, AlertValidationError
from railmate.notifications import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    VIBRATION_PATTERN,
    LoggingNotifier,
    Notifier,
    RecordingNotifier,
)
from railmate.scheduler import Scheduler, SimulatedScheduler, ThreadingScheduler


class TestSetupAlert(unittest.TestCase):
    """Test the single-shot alert timer."""

    def setUp(self):
        self.scheduler = SimulatedScheduler()
        self.notifier = RecordingNotifier()
        self.on_fire = MagicMock()

    def test_fires_after_delay(self):
        """Test the notification and callback after the configured delay."""
        handle = setup_alert(
            self.scheduler, "12301", "Mumbai Central", 10, self.on_fire,
            notifier=self.notifier, seconds_per_minute=1,
        )
        self.scheduler.advance(9)
        self.on_fire.assert_not_called()

        self.scheduler.advance(1)
        self.on_fire.assert_called_once_with()
        self.assertTrue(handle.fired)
        self.assertEqual(
            self.notifier.delivered,
            [(
                "Train 12301 Approaching!",
                "Your train will arrive at Mumbai Central in approximately 10 minutes. Please get ready.",
            )],
        )
        self.assertEqual(self.notifier.sounds, 1)
        self.assertEqual(self.notifier.vibrations, [VIBRATION_PATTERN])

    def test_delay_defaults_to_real_minutes(self):
        """Test minutes_before is treated as minutes by default."""
        handle = setup_alert(self.scheduler, "12301", "Mumbai Central", 10, self.on_fire)
        self.assertEqual(handle.due, 600)

        self.scheduler.advance(599)
        self.on_fire.assert_not_called()
        self.scheduler.advance(1)
        self.on_fire.assert_called_once()

    def test_cancel_before_fire(self):
        """Test that cancelling before the delay means no notification and no callback."""
        handle = setup_alert(
            self.scheduler, "12301", "Mumbai Central", 10, self.on_fire,
            notifier=self.notifier, seconds_per_minute=1,
        )
        self.scheduler.advance(5)
        self.assertTrue(handle.cancel())
        self.scheduler.advance(60)

        self.on_fire.assert_not_called()
        self.assertEqual(self.notifier.delivered, [])
        self.assertFalse(handle.cancel())

    def test_cancel_after_fire_is_noop(self):
        """Test cancel() after firing returns False."""
        handle = setup_alert(
            self.scheduler, "12301", "Pune Junction", 1, self.on_fire,
            notifier=self.notifier, seconds_per_minute=1,
        )
        self.scheduler.advance(1)
        self.assertFalse(handle.cancel())
        self.on_fire.assert_called_once()

    def test_permission_denied_still_fires(self):
        """Test the callback runs when notifications are not permitted."""
        notifier = RecordingNotifier(permission=PERMISSION_DENIED)
        setup_alert(
            self.scheduler, "12301", "Pune Junction", 1, self.on_fire,
            notifier=notifier, seconds_per_minute=1,
        )
        self.scheduler.advance(1)

        self.on_fire.assert_called_once()
        self.assertEqual(notifier.delivered, [])
        self.assertEqual(notifier.sounds, 0)

    def test_permission_requested_when_undecided(self):
        """Test an undecided permission is requested before displaying."""
        notifier = RecordingNotifier(permission=PERMISSION_DEFAULT)
        setup_alert(
            self.scheduler, "12301", "Pune Junction", 1, self.on_fire,
            notifier=notifier, seconds_per_minute=1,
        )
        self.scheduler.advance(1)
        self.assertEqual(len(notifier.delivered), 1)

    def test_broken_notifier_still_fires(self):
        """Test notification failures degrade to logging."""
        class BrokenNotifier(LoggingNotifier):
            def show(self, title, body):
                raise OSError("no display")

        setup_alert(
            self.scheduler, "12301", "Pune Junction", 1, self.on_fire,
            notifier=BrokenNotifier(), seconds_per_minute=1,
        )
        self.scheduler.advance(1)
        self.on_fire.assert_called_once()

    def test_failing_sound_does_not_block_vibration(self):
        """Test each side effect is attempted independently."""
        class Mute(RecordingNotifier):
            def play_sound(self):
                raise RuntimeError("autoplay blocked")

        notifier = Mute()
        self.assertTrue(notifier.notify("t", "b"))
        self.assertEqual(notifier.vibrations, [VIBRATION_PATTERN])

    def test_base_notifier_displays_to_log(self):
        """Test the base notifier reports a delivered notification."""
        notifier = Notifier(PERMISSION_GRANTED)
        with self.assertLogs("railmate.notifications", level="INFO") as logs:
            self.assertTrue(notifier.notify("Train 12301 Approaching!", "body"))
        self.assertFalse(any("Failed" in line for line in logs.output))

    def test_scheduler_is_abstract(self):
        with self.assertRaises(TypeError):
            Scheduler()


class TestAlertManager(unittest.TestCase):
    """Test the session-level alert owner."""

    def setUp(self):
        self.scheduler = SimulatedScheduler()
        self.notifier = RecordingNotifier()
        self.manager = AlertManager(self.scheduler, self.notifier, seconds_per_minute=1)
        self.fired = []

    def test_countdown(self):
        """Test the countdown tracks whole seconds until the alert fires."""
        session = self.manager.set_alert("12301", "Mumbai Central", 10, self.fired.append)
        self.assertTrue(session.active)
        self.assertEqual(session.remaining_countdown, 10)

        self.scheduler.advance(3)
        self.assertEqual(session.remaining_countdown, 7)

        self.scheduler.advance(7)
        self.assertFalse(session.active)
        self.assertEqual(session.remaining_countdown, 0)
        self.assertEqual(self.fired, [session])
        self.assertIsNone(self.manager.active_session)
        self.assertIs(self.manager.last_session, session)
        self.assertEqual(self.scheduler.pending_count, 0)

    def test_cancel_before_fire(self):
        """Test cancelling with minutes_before = 10 before 10 time units elapse."""
        session = self.manager.set_alert("12301", "Mumbai Central", 10, self.fired.append)
        self.scheduler.advance(4)

        self.assertTrue(self.manager.cancel_alert())
        self.assertFalse(session.active)
        self.assertEqual(session.remaining_countdown, 0)

        self.scheduler.advance(30)
        self.assertEqual(self.fired, [])
        self.assertEqual(self.notifier.delivered, [])
        self.assertFalse(self.manager.cancel_alert())

    def test_only_one_active_alert(self):
        """Test a second alert is refused while one is active."""
        self.manager.set_alert("12301", "Mumbai Central", 10)
        with self.assertRaises(AlertError):
            self.manager.set_alert("12259", "Jaipur Junction", 5)

        self.manager.cancel_alert()
        session = self.manager.set_alert("12259", "Jaipur Junction", 5)
        self.assertEqual(session.train_number, "12259")

    def test_new_alert_after_fire(self):
        """Test a fired alert frees the slot."""
        self.manager.set_alert("12301", "Mumbai Central", 2)
        self.scheduler.advance(2)
        session = self.manager.set_alert("12301", "Pune Junction", 3)
        self.assertTrue(session.active)

    def test_validation(self):
        """Test incomplete settings are rejected."""
        with self.assertRaises(AlertValidationError):
            self.manager.set_alert("", "Mumbai Central", 10)
        with self.assertRaises(AlertValidationError):
            self.manager.set_alert("12301", "  ", 10)
        with self.assertRaises(AlertValidationError):
            self.manager.set_alert("12301", "Mumbai Central", 0)
        self.assertIsNone(self.manager.last_session)

    def test_close_cancels_timers(self):
        """Test close() leaves nothing scheduled."""
        self.manager.set_alert("12301", "Mumbai Central", 10, self.fired.append)
        self.manager.close()
        self.assertEqual(self.scheduler.pending_count, 0)
        self.scheduler.advance(20)
        self.assertEqual(self.fired, [])


class BlockingNotifier(RecordingNotifier):
    """Holds show() until released, so a firing alert can be observed mid-flight."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def show(self, title, body):
        self.entered.set()
        self.release.wait(5)
        super().show(title, body)


class TestAlertManagerThreaded(unittest.TestCase):
    """Test cancellation racing a real timer."""

    def setUp(self):
        self.scheduler = ThreadingScheduler()
        self.notifier = BlockingNotifier()
        self.manager = AlertManager(self.scheduler, self.notifier, seconds_per_minute=0.01)
        self.done = threading.Event()
        self.fired = []

    def tearDown(self):
        self.notifier.release.set()
        self.manager.close()
        self.scheduler.shutdown()

    def on_fire(self, session):
        self.fired.append(session)
        self.done.set()

    def test_cancel_while_firing_is_refused(self):
        """Test cancel_alert reports False once the alert has started firing."""
        session = self.manager.set_alert("12301", "Mumbai Central", 1, self.on_fire)
        self.assertTrue(self.notifier.entered.wait(5))

        self.assertFalse(self.manager.cancel_alert())
        self.assertTrue(session.active)

        self.notifier.release.set()
        self.assertTrue(self.done.wait(5))
        self.assertEqual(self.fired, [session])
        self.assertFalse(session.active)
        self.assertEqual(len(self.notifier.delivered), 1)


if __name__ == "__main__":
    unittest.main()
