"""Tests for scheduled task handles."""

import sys
import threading
import time
import unittest
from pathlib import Path

# Add src to path so we can import railmate
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from railmate.scheduler import SimulatedScheduler, ThreadingScheduler


class TestSimulatedScheduler(unittest.TestCase):
    """Test the virtual clock."""

    def setUp(self):
        self.scheduler = SimulatedScheduler()
        self.calls = []

    def test_runs_in_due_order(self):
        """Test callbacks run in due order, ties in scheduling order."""
        self.scheduler.call_later(3, self.calls.append, "c")
        self.scheduler.call_later(1, self.calls.append, "a")
        self.scheduler.call_later(1, self.calls.append, "b")

        self.assertEqual(self.scheduler.advance(2), 2)
        self.assertEqual(self.calls, ["a", "b"])
        self.assertEqual(self.scheduler.now(), 2)

        self.scheduler.advance(1)
        self.assertEqual(self.calls, ["a", "b", "c"])

    def test_cancel_prevents_callback(self):
        """Test a cancelled task never runs."""
        task = self.scheduler.call_later(5, self.calls.append, "x")
        self.assertTrue(task.pending)
        self.assertTrue(task.cancel())
        self.assertFalse(task.cancel())

        self.scheduler.advance(10)
        self.assertEqual(self.calls, [])
        self.assertTrue(task.cancelled)
        self.assertFalse(task.fired)

    def test_cancel_after_fire_is_noop(self):
        """Test cancelling a fired task returns False."""
        task = self.scheduler.call_later(1, self.calls.append, "x")
        self.scheduler.advance(1)
        self.assertTrue(task.fired)
        self.assertFalse(task.cancel())
        self.assertEqual(self.calls, ["x"])

    def test_chained_tasks_within_one_advance(self):
        """Test tasks scheduled from callbacks run if they fall due."""
        def chain(n):
            self.calls.append(n)
            if n < 3:
                self.scheduler.call_later(1, chain, n + 1)

        self.scheduler.call_later(1, chain, 1)
        self.scheduler.advance(10)
        self.assertEqual(self.calls, [1, 2, 3])

    def test_run_until_idle(self):
        """Test draining the queue."""
        self.scheduler.call_later(100, self.calls.append, "late")
        self.assertEqual(self.scheduler.run_until_idle(), 1)
        self.assertEqual(self.scheduler.now(), 100)
        self.assertEqual(self.scheduler.pending_count, 0)

    def test_shutdown_cancels_pending(self):
        """Test shutdown revokes everything still queued."""
        task = self.scheduler.call_later(1, self.calls.append, "x")
        self.scheduler.shutdown()
        self.assertTrue(task.cancelled)
        self.scheduler.advance(5)
        self.assertEqual(self.calls, [])


class TestThreadingScheduler(unittest.TestCase):
    """Test the wall-clock scheduler."""

    def setUp(self):
        self.scheduler = ThreadingScheduler()

    def tearDown(self):
        self.scheduler.shutdown()

    def test_fires_after_delay(self):
        """Test a callback runs on a timer thread."""
        done = threading.Event()
        task = self.scheduler.call_later(0.01, done.set)
        self.assertTrue(done.wait(5))
        self.assertTrue(task.fired)

    def test_cancel_before_fire(self):
        """Test a cancelled timer never runs its callback."""
        done = threading.Event()
        task = self.scheduler.call_later(0.2, done.set)
        self.assertTrue(task.cancel())
        time.sleep(0.4)
        self.assertFalse(done.is_set())

    def test_cancelled_task_does_not_run_when_timer_wakes(self):
        """Test the handle, not the timer thread, decides whether the callback runs."""
        calls = []
        task = self.scheduler.call_later(60, calls.append, "x")
        task.cancel()
        task.run()
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
