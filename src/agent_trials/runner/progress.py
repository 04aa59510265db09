"""Progress tracking for a batch of concurrently executed items."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TextIO, TypeVar

T = TypeVar("T")


@dataclass
class RunError:
    run_id: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"run_id": self.run_id, "error": self.message}


@dataclass
class ProgressState:
    """Counters for one batch. Created fresh for every scheduler call."""
    total: int
    running: dict[str, str] = field(default_factory=dict)  # run id -> label, insertion ordered
    completed: int = 0
    failed: int = 0
    errors: list[RunError] = field(default_factory=list)

    @property
    def has_failed(self) -> bool:
        return self.failed > 0


class ProgressTracker(Generic[T]):
    """Applies start/complete/fail transitions and renders a single status line."""

    def __init__(
        self,
        total: int,
        id_of: Callable[[T], str],
        label_of: Callable[[T], str] | None = None,
        stream: TextIO | None = None,
    ):
        self.state = ProgressState(total=total)
        self._id_of = id_of
        self._label_of = label_of or id_of
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def status_line(self) -> str:
        s = self.state
        running = f" [{', '.join(s.running.values())}]" if s.running else ""
        return (
            f"Running: {len(s.running)} | Completed: {s.completed} | "
            f"Failed: {s.failed} | Total: {s.total}{running}"
        )

    def _update_display(self) -> None:
        self.stream.write(f"\r{self.status_line()}")
        self.stream.flush()

    def task_started(self, item: T) -> None:
        self.state.running[self._id_of(item)] = self._label_of(item)
        self._update_display()

    def task_completed(self, item: T) -> None:
        self.state.running.pop(self._id_of(item), None)
        self.state.completed += 1
        self._update_display()

    def task_failed(self, item: T, error: BaseException) -> None:
        run_id = self._id_of(item)
        self.state.running.pop(run_id, None)
        self.state.failed += 1
        self.state.errors.append(RunError(run_id=run_id, message=str(error) or type(error).__name__))
        self._update_display()

    def summary_lines(self) -> list[str]:
        s = self.state
        if not s.errors:
            return [f"✓ All {s.completed} tasks completed successfully"]
        lines = [
            f"✓ {s.completed} tasks completed successfully",
            f"✗ {s.failed} tasks failed:",
            "",
        ]
        lines += [f"  - {e.run_id}: {e.message}" for e in s.errors]
        return lines

    def print_summary(self) -> None:
        print("\n", file=self.stream)
        for line in self.summary_lines():
            print(line, file=self.stream)

    def to_dict(self) -> dict[str, Any]:
        s = self.state
        return {
            "total": s.total,
            "completed": s.completed,
            "failed": s.failed,
            "errors": [e.to_dict() for e in s.errors],
        }
