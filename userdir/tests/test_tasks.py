"""Tests for :mod:`userdir.tasks`."""

from unittest import TestCase
import threading

from ..tasks import BackgroundTasks


class TestBackgroundTasks(TestCase):
    """Tests for :class:`.BackgroundTasks`."""

    def setUp(self):
        self.tasks = BackgroundTasks(max_workers=1, max_pending=2)

    def tearDown(self):
        self.tasks.shutdown(wait=True)

    def test_runs_task(self):
        """Submitted work is run with its arguments."""
        results = []
        future = self.tasks.submit('append', results.append, 'done')
        future.result(timeout=5)
        self.assertEqual(results, ['done'])

    def test_failure_is_contained(self):
        """A failing task is logged and counted, not raised."""
        def fail():
            raise RuntimeError('nope')

        with self.assertLogs('userdir.tasks', level='ERROR') as logs:
            future = self.tasks.submit('fail', fail)
            self.assertIsNone(future.result(timeout=5))
        self.assertEqual(self.tasks.error_count, 1)
        self.assertIn('Task fail failed: nope', logs.output[0])

    def test_full_queue_drops_task(self):
        """Submitting never blocks; excess work is dropped."""
        release = threading.Event()
        first = self.tasks.submit('wait', release.wait, 5)
        second = self.tasks.submit('wait', release.wait, 5)
        with self.assertLogs('userdir.tasks', level='WARNING'):
            third = self.tasks.submit('wait', release.wait, 5)
        self.assertIsNone(third)
        self.assertEqual(self.tasks.dropped_count, 1)

        release.set()
        first.result(timeout=5)
        second.result(timeout=5)

        # Slots are released once tasks finish.
        self.assertIsNotNone(self.tasks.submit('noop', lambda: None))

    def test_after_shutdown(self):
        """Work submitted after shutdown is dropped."""
        self.tasks.shutdown()
        with self.assertLogs('userdir.tasks', level='WARNING'):
            self.assertIsNone(self.tasks.submit('late', lambda: None))
