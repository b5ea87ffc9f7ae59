"""Error types raised by the task engine."""

from __future__ import annotations


class TaskError(RuntimeError):
    """Base class for every error the engine raises on purpose."""


class ValidationError(TaskError):
    """A command argument failed validation; nothing was mutated."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        self.message = message or f"Invalid value for '{field}'"
        super().__init__(self.message)


class NotFoundError(TaskError):
    """A command targeted a task id that is not in the collection."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class PersistenceError(TaskError):
    """The storage layer failed to load or save the collection."""
