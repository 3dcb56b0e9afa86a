"""A bounded thread pool that runs request work concurrently."""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 1.5
"""Seconds a request may take before it is considered timed out."""

WARN_TASK_DURATION = DEFAULT_REQUEST_TIMEOUT * 5
"""Seconds of work after which a warning that it is slow is logged."""

MAX_SIMILAR_CONCURRENT_WORK = 2
"""Maximum concurrent tasks with the same description.

Two lets one task start right after a similar one has timed out; once several
similar tasks have timed out but keep running, new ones are refused.
"""


class WorkRefused(RuntimeError):
    """Set on a future whose work was not started because the pool was busy."""


class WorkPool:
    """Runs work functions on worker threads, refusing work when overloaded."""

    def __init__(
        self,
        num_threads: int | None = None,
        warn_duration: float = WARN_TASK_DURATION,
    ) -> None:
        self.num_threads = num_threads if num_threads is not None else (os.cpu_count() or 1)
        if self.num_threads < 1:
            raise ValueError("a work pool needs at least one thread")
        self.warn_duration = warn_duration
        self._lock = threading.Lock()
        self._work: list[str] = []
        self._executor = ThreadPoolExecutor(
            max_workers=self.num_threads, thread_name_prefix="request-worker"
        )

    def __enter__(self) -> WorkPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def receive_from_thread(self, work_fn: Callable[[], Any], description: str) -> Future:
        """Run ``work_fn`` on the pool and return a future for its result.

        If the pool is at capacity, or too much work of the same description is
        running, the work is not started and the future holds WorkRefused.
        An exception raised by the work is set on the future.
        """
        future: Future = Future()
        with self._lock:
            if len(self._work) >= self.num_threads:
                logger.warning(
                    "Could not start `%s` as at work capacity, %r in progress",
                    description,
                    self._work,
                )
                future.set_exception(WorkRefused(f"`{description}`: work pool at capacity"))
                return future
            if self._work.count(description) >= MAX_SIMILAR_CONCURRENT_WORK:
                logger.info(
                    "Could not start `%s` as same work-type is filling half capacity, "
                    "%r in progress",
                    description,
                    self._work,
                )
                future.set_exception(
                    WorkRefused(f"`{description}`: too much similar work in progress")
                )
                return future
            self._work.append(description)

        try:
            self._executor.submit(self._run, work_fn, description, future)
        except RuntimeError:
            self._finish(description)
            raise
        return future

    def _finish(self, description: str) -> None:
        with self._lock:
            try:
                self._work.remove(description)
            except ValueError:
                pass

    def _run(self, work_fn: Callable[[], Any], description: str, future: Future) -> None:
        start = time.monotonic()
        wanted = future.set_running_or_notify_cancel()
        error: BaseException | None = None
        result: Any = None
        try:
            result = work_fn()
        except BaseException as exc:  # the work's failure belongs to its future
            error = exc
        self._finish(description)

        if wanted:
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        elapsed = time.monotonic() - start
        if elapsed >= self.warn_duration:
            logger.warning("`%s` took %.1fs", description, elapsed)

    def in_progress(self) -> list[str]:
        """Descriptions of the work currently running."""
        with self._lock:
            return list(self._work)

    def shutdown(self) -> None:
        """Stop accepting work and wait for running work to finish."""
        self._executor.shutdown(wait=True)


_default_pool: WorkPool | None = None
_default_lock = threading.Lock()


def _pool() -> WorkPool:
    global _default_pool
    with _default_lock:
        if _default_pool is None:
            _default_pool = WorkPool()
        return _default_pool


def receive_from_thread(work_fn: Callable[[], Any], description: str) -> Future:
    """Run ``work_fn`` on the shared request pool; see WorkPool.receive_from_thread."""
    return _pool().receive_from_thread(work_fn, description)