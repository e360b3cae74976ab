"""Fail-fast task group over a thread pool.

Runs independent units of work concurrently and joins them all. The
first exception to be raised (by completion time) is kept in a single
first-write-wins slot and re-raised by ``wait()``; later failures are
logged but not surfaced. Siblings of a failed task are never cancelled:
``wait()`` returns only once every task has finished.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

from osm_geocoder.core.exceptions import ContractError

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future

logger = logging.getLogger(__name__)


class TaskGroupStateError(ContractError):
    """Raised when a task group is used after it has been joined."""

    default_stage = "orchestration"
    default_code = "TASK_GROUP_CLOSED"


class TaskGroup:
    """Start tasks with ``go()``, join them with ``wait()``. Single use.

    Args:
        name: Label used in log lines and worker thread names.
        max_workers: Thread pool size; defaults to one thread per task
            up to the executor's own default.
    """

    def __init__(self, name: str = "tasks", max_workers: int | None = None) -> None:
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._futures: dict[Future[Any], str] = {}
        self._lock = threading.Lock()
        self._error: BaseException | None = None
        self._failed_label = ""
        self._closed = False

    @property
    def error(self) -> BaseException | None:
        """The first error reported by any task, if any."""
        return self._error

    def _record(self, label: str, exc: BaseException) -> None:
        with self._lock:
            if self._error is None:
                self._error = exc
                self._failed_label = label
                logger.error("Task failed | group=%s | task=%s | error=%s", self.name, label, exc)
            else:
                logger.warning(
                    "Task failed after an earlier failure | group=%s | task=%s | error=%s",
                    self.name,
                    label,
                    exc,
                )

    def _run(self, label: str, fn: Callable[..., Any], args: tuple[Any, ...]) -> Any:
        try:
            result = fn(*args)
        except BaseException as exc:
            self._record(label, exc)
            raise
        logger.info("Task finished | group=%s | task=%s", self.name, label)
        return result

    def go(self, label: str, fn: Callable[..., Any], *args: Any) -> None:
        """Start ``fn(*args)`` in the background under *label*.

        Raises:
            TaskGroupStateError: If the group has already been joined.
        """
        if self._closed:
            msg = f"Task group {self.name!r} has already been joined"
            raise TaskGroupStateError(msg)
        future = self._executor.submit(self._run, label, fn, args)
        self._futures[future] = label

    def wait(self) -> None:
        """Block until every task has finished, then raise the first error.

        Raises:
            BaseException: The first exception raised by any task, including
                ``BaseException`` subclasses that are not ``Exception``.
        """
        self._closed = True
        wait(self._futures)
        self._executor.shutdown(wait=True)
        if self._error is not None:
            logger.error(
                "Task group failed | group=%s | tasks=%d | first_failure=%s",
                self.name,
                len(self._futures),
                self._failed_label,
            )
            raise self._error
        logger.info("Task group finished | group=%s | tasks=%d", self.name, len(self._futures))
