"""Task lifecycle callbacks for monitoring and real-time reporting."""

import logging
from typing import Protocol, runtime_checkable

from models.task import Task

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskCallback(Protocol):
    """Protocol for task lifecycle callbacks.

    Implement this protocol to hook into the task ledger. Callbacks fire
    after the ledger has recorded the transition.
    """

    def on_task_started(self, task: Task) -> None:
        """Called when a task moves to running."""
        ...

    def on_task_completed(self, task: Task) -> None:
        """Called when a task completes successfully."""
        ...

    def on_task_failed(self, task: Task) -> None:
        """Called when a task ends in error; task.error holds the message."""
        ...


def _elapsed(task: Task) -> float:
    if task.started_at is None or task.completed_at is None:
        return 0.0
    return (task.completed_at - task.started_at).total_seconds()


class LoggingCallback:
    """Lightweight callback that logs task transitions to the standard logger."""

    def on_task_started(self, task: Task) -> None:
        logger.debug("→ task %s (%s)", task.id, task.type.value)

    def on_task_completed(self, task: Task) -> None:
        logger.info("Task %s (%s) complete in %.1fs", task.id, task.type.value, _elapsed(task))

    def on_task_failed(self, task: Task) -> None:
        logger.error("Task %s (%s) failed: %s", task.id, task.type.value, task.error)


class RichProgressCallback:
    """Progress callback that renders a Rich live progress display in the terminal."""

    _TASK_LABELS: dict[str, str] = {
        "generate_outline": "Generating outline",
        "write_chapter": "Writing chapter",
        "develop_character": "Developing character",
        "translate": "Translating",
        "plagiarism_check": "Checking originality",
        "develop_character_arc": "Developing character arc",
        "check_continuity": "Checking continuity",
        "expand_world_bible": "Expanding world bible",
    }

    def __init__(self, console=None, total: int = 0):
        """
        Args:
            console: Rich Console instance. Creates one if not provided.
            total: Number of tasks expected (for progress bar max).
        """
        self._console = console
        self._total = total
        self._done = 0
        self._progress = None
        self._overall_id = None
        self._step_id = None

    def start(self):
        """Start the progress display. Call before running tasks."""
        from rich.console import Console
        from rich.progress import (
            Progress, SpinnerColumn, TextColumn, TaskProgressColumn,
        )

        console = self._console or Console()
        self._progress = Progress(
            SpinnerColumn("dots"),
            TextColumn("[progress.description]{task.description}"),
            TaskProgressColumn(),
            console=console,
        )
        self._progress.start()
        self._overall_id = self._progress.add_task(
            "Waiting to start...",
            total=self._total if self._total > 0 else None,
        )
        self._step_id = self._progress.add_task("", total=None)

    def stop(self):
        """Stop the progress display."""
        if self._progress:
            self._progress.stop()
            self._progress = None

    def _label(self, task: Task) -> str:
        return self._TASK_LABELS.get(task.type.value, task.type.value)

    def on_task_started(self, task: Task) -> None:
        if not self._progress:
            return
        self._progress.update(self._step_id, description=f"[dim]{self._label(task)}...[/]")

    def on_task_completed(self, task: Task) -> None:
        if not self._progress:
            return
        self._done += 1
        total_label = str(self._total) if self._total > 0 else "?"
        self._progress.update(
            self._overall_id,
            completed=self._done,
            description=f"[green]{self._done}/{total_label} tasks done[/]",
        )
        self._progress.update(self._step_id, description="")

    def on_task_failed(self, task: Task) -> None:
        if not self._progress:
            return
        error = task.error or ""
        self._progress.update(
            self._step_id,
            description=f"[red]{self._label(task)} failed: {error[:80]}[/]",
        )
