"""
Unit tests for the background task runner.
"""
import threading

from xnotify.services.background_tasks import BackgroundTasks


class TestBackgroundTasks:
    """Test suite for BackgroundTasks."""

    def test_runs_submitted_task(self):
        background = BackgroundTasks(max_workers=2)
        results = []

        background.submit('append', results.append, 42)

        assert background.drain(timeout=5) is True
        assert results == [42]
        background.shutdown()

    def test_task_exception_is_contained(self):
        """Test a failing task neither raises to the caller nor blocks others."""
        background = BackgroundTasks(max_workers=1)
        results = []

        def boom():
            raise RuntimeError('task failed')

        future = background.submit('boom', boom)
        background.submit('append', results.append, 'after')

        assert background.drain(timeout=5) is True
        assert future.exception() is None
        assert results == ['after']
        background.shutdown()

    def test_drain_waits_for_nested_tasks(self):
        """Test tasks submitted by running tasks are drained too."""
        background = BackgroundTasks(max_workers=2)
        results = []

        def outer():
            background.submit('inner', results.append, 'inner')

        background.submit('outer', outer)

        assert background.drain(timeout=5) is True
        assert results == ['inner']
        assert background.pending_count() == 0
        background.shutdown()

    def test_drain_timeout(self):
        """Test drain reports unfinished work when it times out."""
        background = BackgroundTasks(max_workers=1)
        release = threading.Event()

        background.submit('blocked', release.wait, 5)

        assert background.drain(timeout=0.05) is False
        release.set()
        assert background.drain(timeout=5) is True
        background.shutdown()
