from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from tasklist.domain.dates import parse_iso_date
from tasklist.domain.entities import AnnotatedTask, TaskEntity, TaskView
from tasklist.domain.enums import MAX_PRIORITY, MIN_PRIORITY
from tasklist.domain.errors import NotFoundError, PersistenceError, ValidationError
from tasklist.domain.filters import FilterState
from tasklist.domain.ports import PersistenceAdapter

from . import view_engine

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore:
    """Owns the task collection and keeps it durable.

    Every successful mutation saves the whole collection exactly once. The new
    collection is saved before it replaces the in-memory one, so a failed save
    leaves the store as it was.
    """

    def __init__(self, adapter: PersistenceAdapter, clock: Clock | None = None) -> None:
        self._adapter = adapter
        self._clock = clock or utcnow
        self._tasks: list[TaskEntity] = list(adapter.load() or [])
        self._next_id = max((task.id for task in self._tasks), default=-1) + 1
        logger.info("TaskStore ready total=%d next_id=%d", len(self._tasks), self._next_id)

    @property
    def tasks(self) -> tuple[TaskEntity, ...]:
        return tuple(self._tasks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def get_collection(self) -> tuple[TaskEntity, ...]:
        return self.tasks

    def get_task(self, task_id: int) -> TaskEntity:
        return self._tasks[self._index_of(task_id)]

    def compute_view(self, filters: FilterState, today: Optional[date] = None) -> TaskView:
        return view_engine.compute_view(self._tasks, filters, today)

    def list_reminders(self, today: Optional[date] = None) -> tuple[AnnotatedTask, ...]:
        return view_engine.list_reminders(self._tasks, today)

    def create(self, title: Any, description: Any, deadline: Any, priority: Any) -> TaskEntity:
        fields = self._clean_fields(title, description, deadline, priority)
        now = self._clock()
        task = TaskEntity(
            id=self._next_id,
            completed=False,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self._commit([*self._tasks, task])
        self._next_id += 1
        logger.info("Created task id=%d", task.id)
        return task

    def update(
        self,
        task_id: int,
        title: Any,
        description: Any,
        deadline: Any,
        priority: Any,
    ) -> TaskEntity:
        index = self._index_of(task_id)
        fields = self._clean_fields(title, description, deadline, priority)
        current = self._tasks[index]
        updated = replace(current, updated_at=self._touch(current), **fields)
        self._replace_at(index, updated)
        logger.info("Updated task id=%d", task_id)
        return updated

    def set_completed(self, task_id: int, completed: bool) -> TaskEntity:
        index = self._index_of(task_id)
        if not isinstance(completed, bool):
            raise ValidationError("completed", "Completed flag must be true or false")
        current = self._tasks[index]
        updated = replace(current, completed=completed, updated_at=self._touch(current))
        self._replace_at(index, updated)
        logger.info("Set task id=%d completed=%s", task_id, completed)
        return updated

    def toggle_completed(self, task_id: int) -> TaskEntity:
        return self.set_completed(task_id, not self.get_task(task_id).completed)

    def delete(self, task_id: int) -> None:
        index = self._index_of(task_id)
        self._commit(self._tasks[:index] + self._tasks[index + 1:])
        logger.info("Deleted task id=%d", task_id)

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(task_id)

    def _replace_at(self, index: int, task: TaskEntity) -> None:
        tasks = list(self._tasks)
        tasks[index] = task
        self._commit(tasks)

    def _commit(self, tasks: list[TaskEntity]) -> None:
        try:
            self._adapter.save(tasks)
        except PersistenceError:
            logger.exception("Saving %d tasks failed", len(tasks))
            raise
        except (OSError, TypeError, ValueError) as exc:
            logger.exception("Saving %d tasks failed", len(tasks))
            raise PersistenceError(f"Could not save tasks: {exc}") from exc
        self._tasks = tasks

    def _touch(self, task: TaskEntity) -> datetime:
        return max(self._clock(), task.created_at)

    @staticmethod
    def _clean_fields(title: Any, description: Any, deadline: Any, priority: Any) -> dict[str, Any]:
        return {
            "title": _require_text("title", title),
            "description": _require_text("description", description),
            "deadline": _parse_deadline(deadline),
            "priority": _parse_priority(priority),
        }


def _require_text(field: str, value: Any) -> str:
    if value is None:
        raise ValidationError(field, f"{field.capitalize()} is required")
    if not isinstance(value, str):
        raise ValidationError(field, f"{field.capitalize()} must be text")
    text = value.strip()
    if not text:
        raise ValidationError(field, f"{field.capitalize()} must not be blank")
    return text


def _parse_deadline(value: Any) -> date:
    if value is None:
        raise ValidationError("deadline", "Deadline is required")
    if isinstance(value, datetime):
        raise ValidationError("deadline", "Deadline must be a date without a time")
    if isinstance(value, date):
        return value
    parsed = parse_iso_date(value)
    if parsed is not None:
        return parsed
    raise ValidationError("deadline", f"Deadline must be a YYYY-MM-DD date, got {value!r}")


def _parse_priority(value: Any) -> int:
    if value is None:
        raise ValidationError("priority", "Priority is required")
    if isinstance(value, bool):
        raise ValidationError("priority", "Priority must be a whole number")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError("priority", f"Priority must be a whole number, got {value!r}") from None
    if not isinstance(value, int):
        raise ValidationError("priority", "Priority must be a whole number")
    if not MIN_PRIORITY <= value <= MAX_PRIORITY:
        raise ValidationError("priority", f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
    return int(value)
