"""
Detached units of work.

Audit writes, failure records and notification sends run here so the
lifecycle can resolve its redirect without waiting on them.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set

from ..utils.structured_logger import get_structured_logger

logger = get_structured_logger('BackgroundTasks')


class BackgroundTasks:
    """
    Fire-and-forget task runner on a thread pool.

    Task exceptions are logged and never re-raised to the submitter.
    """

    def __init__(self, max_workers: int = 4):
        """
        Initialize background task runner.

        Args:
            max_workers: Size of the worker pool
        """
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='xnotify-bg'
        )
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, name: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """
        Schedule ``fn(*args, **kwargs)`` without waiting for it.

        Args:
            name: Task name used in logs
            fn: Callable to run

        Returns:
            Future of the task (callers normally ignore it)
        """
        future = self._executor.submit(self._run, name, fn, *args, **kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _run(self, name: str, fn: Callable[..., Any], *args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as e:
            logger.error(
                f'Background task failed: {name}',
                operation='background_task',
                error=e,
                task=name
            )

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def pending_count(self) -> int:
        """Number of tasks not yet finished."""
        with self._lock:
            return len(self._pending)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every task submitted so far has finished, including
        tasks submitted by running tasks.

        Args:
            timeout: Maximum seconds to wait per round (None waits forever)

        Returns:
            True if nothing is left pending
        """
        while True:
            with self._lock:
                snapshot = set(self._pending)
            if not snapshot:
                return True
            _, not_done = wait(snapshot, timeout=timeout)
            if not_done:
                logger.warning(
                    'Background tasks still pending after drain timeout',
                    operation='drain',
                    pending=len(not_done)
                )
                return False

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Drain outstanding tasks and stop the pool."""
        self.drain(timeout)
        self._executor.shutdown(wait=True)
