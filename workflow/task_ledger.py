"""Task ledger: lifecycle records of every orchestrated asynchronous operation."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from config.exceptions import TaskStateError, ValidationError
from models.enums import TaskStatus, TaskType
from models.store import EntityStore
from models.task import TASK_INPUT_CLASSES, Task, TaskInput
from workflow.callbacks import TaskCallback

logger = logging.getLogger(__name__)


class TaskLedger:
    """Creates tasks, moves them through pending -> running -> complete | error.

    Tasks live in the store's task table in insertion order. Terminal
    states are final: any further transition raises TaskStateError.
    """

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        callbacks: Optional[list[TaskCallback]] = None,
    ):
        self.store = store or EntityStore()
        self.callbacks: list[TaskCallback] = list(callbacks or [])

    def add_callback(self, callback: TaskCallback) -> None:
        self.callbacks.append(callback)

    def remove_callback(self, callback: TaskCallback) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    def _notify(self, hook: str, task: Task) -> None:
        for callback in self.callbacks:
            try:
                getattr(callback, hook)(task)
            except Exception:
                logger.exception("Task callback %s.%s failed", type(callback).__name__, hook)

    # ---- Transitions ----

    def create(self, task_type: TaskType, task_input: TaskInput) -> Task:
        """Record a new pending task.

        Raises:
            ValidationError: If the input payload does not belong to the task type.
        """
        allowed = TASK_INPUT_CLASSES[task_type]
        if not isinstance(task_input, allowed):
            raise ValidationError(
                f"Invalid input for {task_type.value} task",
                {"input": type(task_input).__name__},
            )
        task = Task(type=task_type, input=task_input)
        self.store.tasks[task.id] = task
        logger.debug("Created task %s (%s)", task.id, task_type.value)
        return task

    def mark_running(self, task: Task) -> None:
        if task.status != TaskStatus.PENDING:
            raise TaskStateError(task.id, task.status.value, TaskStatus.RUNNING.value)
        task.status = TaskStatus.RUNNING
        task.started_at = datetime.now()
        self._notify("on_task_started", task)

    def complete(self, task: Task, output: dict[str, Any]) -> None:
        if task.status != TaskStatus.RUNNING:
            raise TaskStateError(task.id, task.status.value, TaskStatus.COMPLETE.value)
        task.status = TaskStatus.COMPLETE
        task.output = output
        task.completed_at = datetime.now()
        self._notify("on_task_completed", task)

    def fail(self, task: Task, message: str) -> None:
        """Mark a pending or running task as failed."""
        if task.status.is_terminal:
            raise TaskStateError(task.id, task.status.value, TaskStatus.ERROR.value)
        task.status = TaskStatus.ERROR
        task.error = message
        task.completed_at = datetime.now()
        self._notify("on_task_failed", task)

    @contextmanager
    def running(self, task: Task) -> Iterator[Task]:
        """Run a block with ``task`` marked running.

        If the block raises, the task is failed with the exception message
        and the exception propagates. If the block finishes without
        completing or failing the task, the task is failed.
        """
        self.mark_running(task)
        try:
            yield task
        except BaseException as e:
            if not task.status.is_terminal:
                self.fail(task, str(e) or type(e).__name__)
            raise
        if not task.status.is_terminal:
            logger.warning("Task %s finished without a result", task.id)
            self.fail(task, "Task finished without a result")

    # ---- Queries ----

    def get(self, task_id: str) -> Optional[Task]:
        return self.store.tasks.get(task_id)

    def delete_all_for(self, parent_id: str) -> int:
        """Remove every task whose input references ``parent_id``."""
        doomed = [task_id for task_id, task in self.store.tasks.items() if task.references(parent_id)]
        for task_id in doomed:
            del self.store.tasks[task_id]
        if doomed:
            logger.debug("Deleted %d tasks referencing %s", len(doomed), parent_id)
        return len(doomed)

    def list(self, parent_id: Optional[str] = None) -> "list[Task]":
        """All tasks in insertion order, optionally only those referencing ``parent_id``."""
        tasks = self.store.tasks.values()
        if parent_id is None:
            return [task for task in tasks]
        return [task for task in tasks if task.references(parent_id)]
