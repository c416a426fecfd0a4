from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ltex_commands.progress import CancellationTokenSource, ProgressStack


class RecordingReporter:
    def __init__(self) -> None:
        self.calls: list[tuple[float, str]] = []

    def __call__(self, fraction: float, message: str) -> None:
        self.calls.append((fraction, message))

    @property
    def fractions(self) -> list[float]:
        return [fraction for fraction, _ in self.calls]


def test_weighted_tasks_map_to_overall_progress() -> None:
    reporter = RecordingReporter()
    stack = ProgressStack("Checking", reporter)

    stack.start_task(0.1, "Finding")
    assert stack.depth == 1
    stack.finish_task()
    assert stack.overall_progress == pytest.approx(0.1)

    stack.start_task(0.9, "Checking documents")
    stack.update_task(0.5, "Half way")
    assert stack.overall_progress == pytest.approx(0.55)
    assert reporter.calls[-1] == (pytest.approx(0.55), "Half way")

    stack.finish_task()
    assert stack.depth == 0
    assert stack.overall_progress == pytest.approx(1.0)


def test_reported_progress_never_decreases() -> None:
    reporter = RecordingReporter()
    stack = ProgressStack("root", reporter)
    stack.start_task(1.0, "work")

    stack.update_task(0.6)
    stack.update_task(0.2)

    assert reporter.fractions == sorted(reporter.fractions)
    assert stack.overall_progress == pytest.approx(0.6)


def test_finishing_root_task_is_an_error() -> None:
    stack = ProgressStack("root")

    with pytest.raises(RuntimeError):
        stack.finish_task()


def test_task_size_must_be_a_fraction() -> None:
    stack = ProgressStack("root")

    with pytest.raises(ValueError):
        stack.start_task(1.5, "too big")


def test_cancellation_is_visible_through_token() -> None:
    source = CancellationTokenSource()
    token = source.token
    assert token.is_cancellation_requested is False

    source.cancel()
    source.cancel()

    assert token.is_cancellation_requested is True
