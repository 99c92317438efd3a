"""Best-effort background work on a small thread pool

Used for side effects which must never slow down or fail the request that
triggered them, e.g. bumping an account's aggregate click counter after a
redirect. A failing task is retried with exponential backoff inside its
worker thread and then logged; nothing is ever propagated to the submitter.

AWS Lambda freezes the execution environment as soon as a handler returns,
so threads still running then only resume on the next invocation of that
environment (or never). Handlers call drain() right before responding to
give pending tasks a short, bounded amount of time to finish.

Example:
    >>> runner = BackgroundTaskRunner(max_workers=2)
    >>> runner.submit(account_dao.increment_total_clicks, 'user-123', description='increment_total_clicks')
    >>> runner.drain(timeout=0.5)
    True
"""

import time
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any
from collections.abc import Callable

from snaplink.constants import Default


logger = logging.getLogger(__name__)

_default_runner = None
_default_runner_lock = threading.Lock()


class BackgroundTaskRunner:
    """Run fire-and-forget tasks with their own retry and failure policy

    Attributes:
        retries (int):
            Extra attempts after the first failure.
        backoff (float):
            Delay in seconds before the first retry, doubled on each further retry.
    """

    def __init__(self, max_workers: int = Default.BACKGROUND_WORKERS, retries: int = 2, backoff: float = 0.05):
        self.retries = retries
        self.backoff = backoff
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='snaplink-background')
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def submit(self, task: Callable[..., Any], *args, description: str | None = None, **kwargs) -> Future:
        """Schedule `task(*args, **kwargs)`; the returned future never raises"""
        description = description or getattr(task, '__name__', repr(task))
        future = self._executor.submit(self._run, task, description, args, kwargs)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def drain(self, timeout: float = Default.BACKGROUND_DRAIN_TIMEOUT) -> bool:
        """Wait up to `timeout` seconds for submitted tasks, True if none is left running"""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True

        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            logger.warning('Background tasks still pending after drain timeout.', extra={'pending': len(not_done), 'timeout': timeout})
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _discard(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _run(self, task: Callable[..., Any], description: str, args: tuple, kwargs: dict) -> Any:
        for attempt in range(self.retries + 1):
            try:
                return task(*args, **kwargs)
            except Exception:
                if attempt == self.retries:
                    logger.exception('Background task failed.', extra={'task': description, 'attempts': attempt + 1})
                    return None
                time.sleep(self.backoff * 2**attempt)


def default_runner(max_workers: int = Default.BACKGROUND_WORKERS) -> BackgroundTaskRunner:
    """Return the process-wide runner, creating it on first use

    Lambda handlers share one pool across warm invocations.
    """
    global _default_runner
    with _default_runner_lock:
        if _default_runner is None:
            _default_runner = BackgroundTaskRunner(max_workers=max_workers)
        return _default_runner
