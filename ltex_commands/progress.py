"""Cooperative cancellation and weighted progress reporting.

Cancellation is poll-based: long-running commands check
``token.is_cancellation_requested`` at well-defined points and return early.
Nothing in flight is interrupted.

``ProgressStack`` turns nested tasks with relative weights into a single
overall fraction in ``[0, 1]``. A task started with ``size=0.9`` inside the
root task covers 90% of the total bar; updating it to ``0.5`` moves the bar to
its start plus 45%.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

LOGGER = logging.getLogger(__name__)

ProgressReporter = Callable[[float, str], None]


class CancellationToken:
    """Read-only view of a cancellation flag."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled


class CancellationTokenSource:
    """Owner of a :class:`CancellationToken` that can request cancellation."""

    def __init__(self) -> None:
        self.token = CancellationToken()

    def cancel(self) -> None:
        if not self.token._cancelled:
            LOGGER.info("Cancellation requested")
        self.token._cancelled = True


def logging_progress_reporter(fraction: float, message: str) -> None:
    LOGGER.info("[%3d%%] %s", round(fraction * 100), message)


@dataclass
class _Task:
    name: str
    start: float
    size: float
    progress: float = 0.0

    @property
    def position(self) -> float:
        return self.start + self.size * self.progress


class ProgressStack:
    """Stack of weighted tasks that reports overall progress.

    Args:
        name: Title of the root task
        reporter: Callable receiving ``(overall_fraction, message)``
    """

    def __init__(self, name: str, reporter: ProgressReporter | None = None) -> None:
        self._reporter = reporter
        self._tasks: list[_Task] = [_Task(name=name, start=0.0, size=1.0)]
        self._last_reported = 0.0

    @property
    def overall_progress(self) -> float:
        return self._tasks[-1].position

    @property
    def depth(self) -> int:
        return len(self._tasks) - 1

    def start_task(self, size: float, message: str) -> None:
        """Push a sub-task covering ``size`` of the current task."""
        if not 0.0 <= size <= 1.0:
            raise ValueError(f"task size must be within [0, 1], got {size}")
        parent = self._tasks[-1]
        remaining = max(0.0, 1.0 - parent.progress)
        child = _Task(
            name=message,
            start=parent.position,
            size=parent.size * min(size, remaining),
        )
        self._tasks.append(child)
        self._report(message)

    def update_task(self, progress: float, message: str | None = None) -> None:
        """Set the fraction of the current task that is complete."""
        task = self._tasks[-1]
        task.progress = min(1.0, max(task.progress, progress))
        self._report(message or task.name)

    def finish_task(self) -> None:
        """Pop the current task and credit its full size to the parent."""
        if len(self._tasks) == 1:
            raise RuntimeError("no task has been started")
        child = self._tasks.pop()
        parent = self._tasks[-1]
        if parent.size > 0:
            end = child.start + child.size
            parent.progress = min(1.0, (end - parent.start) / parent.size)
        self._report(parent.name)

    def _report(self, message: str) -> None:
        # Never move the bar backwards
        fraction = max(self._last_reported, min(1.0, self.overall_progress))
        self._last_reported = fraction
        if self._reporter is not None:
            self._reporter(fraction, message)
