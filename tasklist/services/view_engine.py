"""Derived views of the task collection.

Everything here is a pure function of its arguments: the collection passed
in is never reordered or modified, and the result depends only on the tasks,
the filter state and the calendar date used as "today".
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from tasklist.domain.entities import AnnotatedTask, TaskEntity, TaskView
from tasklist.domain.enums import StatusFilter
from tasklist.domain.filters import FilterState


def _sort_key(task: TaskEntity) -> tuple[bool, date, int]:
    return (task.completed, task.deadline, -task.priority)


def _matches(task: TaskEntity, filters: FilterState) -> bool:
    if filters.status == StatusFilter.COMPLETED and not task.completed:
        return False
    if filters.status == StatusFilter.INCOMPLETE and task.completed:
        return False
    return filters.priority is None or task.priority == filters.priority


def annotate(task: TaskEntity, today: date) -> AnnotatedTask:
    if task.completed:
        return AnnotatedTask(task=task)
    return AnnotatedTask(
        task=task,
        overdue=task.deadline < today,
        due_today=task.deadline == today,
    )


def sort_tasks(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    """Incomplete first, then earliest deadline, then highest priority."""
    return sorted(tasks, key=_sort_key)


def compute_view(
    tasks: Iterable[TaskEntity],
    filters: FilterState,
    today: Optional[date] = None,
) -> TaskView:
    today = today or date.today()
    snapshot = list(tasks)
    visible = [task for task in sort_tasks(snapshot) if _matches(task, filters)]
    return TaskView(
        tasks=tuple(annotate(task, today) for task in visible),
        visible_count=len(visible),
        total_count=len(snapshot),
        completed_count=sum(1 for task in snapshot if task.completed),
    )


def list_reminders(
    tasks: Iterable[TaskEntity],
    today: Optional[date] = None,
) -> tuple[AnnotatedTask, ...]:
    today = today or date.today()
    due = [task for task in tasks if not task.completed and task.deadline <= today]
    return tuple(annotate(task, today) for task in sort_tasks(due))
