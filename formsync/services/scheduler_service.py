"""Background work scheduling: a worker pool plus tagged recurring tasks."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Runs work off the caller's thread."""

    def immediate(self, task: Callable[[], Any]) -> Future[Any]:
        """Run ``task`` once on a background worker."""
        ...

    def schedule_repeating(
        self, tag: str, interval_seconds: float, task: Callable[[], Any]
    ) -> None:
        """Run ``task`` every ``interval_seconds`` until ``cancel(tag)``.

        Scheduling a tag that is already scheduled replaces it.
        """
        ...

    def cancel(self, tag: str) -> None:
        """Stop the recurring task registered under ``tag``, if any."""
        ...

    def is_scheduled(self, tag: str) -> bool: ...


class _RepeatingTask(threading.Thread):
    """Daemon thread that runs a task, then waits out the interval."""

    def __init__(self, tag: str, interval_seconds: float, task: Callable[[], Any]) -> None:
        super().__init__(name=f"formsync-{tag}", daemon=True)
        self.tag = tag
        self.interval_seconds = interval_seconds
        self.task = task
        self.stop_event = threading.Event()

    def run(self) -> None:
        logger.info("Recurring task %s started (interval=%.0fs)", self.tag, self.interval_seconds)
        while not self.stop_event.wait(self.interval_seconds):
            try:
                self.task()
            except Exception:
                logger.exception("Recurring task %s failed", self.tag)
        logger.info("Recurring task %s stopped", self.tag)


class ThreadScheduler:
    """Scheduler backed by a thread pool and one thread per recurring tag."""

    def __init__(self, max_workers: int = 2) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="formsync")
        self._repeating: dict[str, _RepeatingTask] = {}
        self._lock = threading.Lock()

    def immediate(self, task: Callable[[], Any]) -> Future[Any]:
        return self._executor.submit(task)

    def schedule_repeating(
        self, tag: str, interval_seconds: float, task: Callable[[], Any]
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        worker = _RepeatingTask(tag, interval_seconds, task)
        with self._lock:
            previous = self._repeating.pop(tag, None)
            self._repeating[tag] = worker
        if previous is not None:
            previous.stop_event.set()
        worker.start()

    def cancel(self, tag: str) -> None:
        with self._lock:
            worker = self._repeating.pop(tag, None)
        if worker is not None:
            worker.stop_event.set()

    def is_scheduled(self, tag: str) -> bool:
        with self._lock:
            return tag in self._repeating

    def shutdown(self, wait: bool = True) -> None:
        """Stop all recurring tasks and the worker pool."""
        with self._lock:
            workers = list(self._repeating.values())
            self._repeating.clear()
        for worker in workers:
            worker.stop_event.set()
        if wait:
            for worker in workers:
                worker.join(timeout=10)
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ThreadScheduler:
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()
