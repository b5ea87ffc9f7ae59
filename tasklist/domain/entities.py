from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class TaskEntity:
    id: int
    title: str
    description: str
    deadline: date
    priority: int
    completed: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AnnotatedTask:
    task: TaskEntity
    overdue: bool = False
    due_today: bool = False


@dataclass(frozen=True)
class TaskView:
    tasks: tuple[AnnotatedTask, ...]
    visible_count: int
    total_count: int
    completed_count: int
