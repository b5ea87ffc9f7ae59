from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from tasklist.config import SETTINGS
from tasklist.domain.dates import parse_iso_date
from tasklist.domain.entities import TaskEntity
from tasklist.domain.enums import DEFAULT_PRIORITY, MAX_PRIORITY, MIN_PRIORITY
from tasklist.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)


def _to_record(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "deadline": task.deadline.isoformat(),
        "priority": task.priority,
        "completed": task.completed,
        "createdAt": task.created_at.isoformat(),
        "updatedAt": task.updated_at.isoformat(),
    }


def _to_entity(record: Any, loaded_at: datetime) -> Optional[TaskEntity]:
    """Build a task from a stored record, or None if the record is unusable.

    Only id, title and deadline are required. Every other field falls back to
    a default when it is missing or has the wrong shape.
    """
    if not isinstance(record, dict):
        return None

    task_id = _parse_id(record.get("id"))
    title = record.get("title")
    deadline = parse_iso_date(record.get("deadline"))
    if task_id is None or deadline is None or not isinstance(title, str) or not title.strip():
        return None

    description = record.get("description")
    completed = record.get("completed")
    created_at = _parse_timestamp(record.get("createdAt")) or loaded_at
    updated_at = _parse_timestamp(record.get("updatedAt"))
    if updated_at is None or updated_at < created_at:
        updated_at = created_at

    return TaskEntity(
        id=task_id,
        title=title.strip(),
        description=description.strip() if isinstance(description, str) else "",
        deadline=deadline,
        priority=_parse_priority(record.get("priority")),
        completed=completed if isinstance(completed, bool) else False,
        created_at=created_at,
        updated_at=updated_at,
    )


def _parse_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if isinstance(value, int) and value >= 0:
        return value
    return None


def _parse_priority(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and MIN_PRIORITY <= value <= MAX_PRIORITY:
        return value
    return int(DEFAULT_PRIORITY)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TaskRepository:
    """Saves the whole collection as one JSON array under a fixed key."""

    def __init__(self, kv: KeyValueStore, key: str | None = None) -> None:
        self._kv = kv
        self.key = key or SETTINGS.storage_key

    def load(self) -> Optional[list[TaskEntity]]:
        raw = self._kv.get(self.key)
        if raw is None:
            return None

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError, RecursionError):
            logger.warning("Stored value under key=%s is not valid JSON, starting empty", self.key)
            return []
        if not isinstance(payload, list):
            logger.warning(
                "Stored value under key=%s is %s, expected a list; starting empty",
                self.key,
                type(payload).__name__,
            )
            return []

        loaded_at = datetime.now(timezone.utc)
        tasks: list[TaskEntity] = []
        seen_ids: set[int] = set()
        for index, record in enumerate(payload):
            task = _to_entity(record, loaded_at)
            if task is None:
                logger.warning("Dropping malformed task record at index %d", index)
                continue
            if task.id in seen_ids:
                logger.warning("Dropping task record with duplicate id=%d", task.id)
                continue
            seen_ids.add(task.id)
            tasks.append(task)
        return tasks

    def save(self, tasks: Sequence[TaskEntity]) -> None:
        payload = json.dumps([_to_record(task) for task in tasks], ensure_ascii=False)
        self._kv.set(self.key, payload)
