"""
Fire-and-forget execution of best-effort work.

Work submitted here runs on a small thread pool, independently of the
request that submitted it. Submission never blocks: if too much work is
already pending the new task is dropped with a warning. Failures are logged
and go no further.
"""

from typing import Any, Callable, Optional
from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
import time

from .exceptions import DetachedTaskError

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """
    Bounded executor for detached tasks.

    Parameters
    ----------
    max_workers : int
        Size of the thread pool.
    max_pending : int
        Largest number of tasks that may be queued or running at once.

    """

    def __init__(self, max_workers: int = 2, max_pending: int = 100) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix='userdir-task')
        self._slots = threading.BoundedSemaphore(max_pending)
        self._lock = threading.Lock()
        self._error_count = 0
        self._dropped_count = 0

    @property
    def error_count(self) -> int:
        """Number of tasks that raised an exception."""
        with self._lock:
            return self._error_count

    @property
    def dropped_count(self) -> int:
        """Number of tasks refused because the queue was full."""
        with self._lock:
            return self._dropped_count

    def submit(self, name: str, fn: Callable[..., Any], *args: Any,
               **kwargs: Any) -> Optional[Future]:
        """
        Schedule ``fn(*args, **kwargs)`` and return without waiting.

        Returns
        -------
        :class:`concurrent.futures.Future` or None
            ``None`` if the task was dropped.

        """
        if not self._slots.acquire(blocking=False):
            with self._lock:
                self._dropped_count += 1
            logger.warning('Background queue full; dropped task %s', name)
            return None
        try:
            return self._executor.submit(self._run, name, fn, *args,
                                         **kwargs)
        except RuntimeError:    # Executor is shutting down.
            self._slots.release()
            logger.warning('Executor shut down; dropped task %s', name)
            return None

    def _run(self, name: str, fn: Callable[..., Any], *args: Any,
             **kwargs: Any) -> None:
        start = time.monotonic()
        try:
            fn(*args, **kwargs)
        except Exception as e:
            with self._lock:
                self._error_count += 1
            error = DetachedTaskError(f'Task {name} failed: {e}')
            logger.error('%s', error, exc_info=True)
        else:
            logger.debug('Task %s finished in %.1f ms', name,
                         (time.monotonic() - start) * 1000)
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work, and optionally wait for pending tasks."""
        self._executor.shutdown(wait=wait)
