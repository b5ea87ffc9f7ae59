from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from tasklist.domain.entities import TaskEntity
from tasklist.domain.errors import ValidationError
from tasklist.services.task_store import TaskStore

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "id",
    "title",
    "description",
    "deadline",
    "priority",
    "completed",
]

TRUE_VALUES = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class ImportResult:
    created: int
    skipped: int


def export_csv(tasks: Iterable[TaskEntity], path: str | Path) -> int:
    written = 0
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for task in tasks:
            writer.writerow(
                {
                    "id": task.id,
                    "title": task.title,
                    "description": task.description,
                    "deadline": task.deadline.isoformat(),
                    "priority": task.priority,
                    "completed": "true" if task.completed else "false",
                }
            )
            written += 1
    logger.info("Exported %d tasks to %s", written, path)
    return written


def import_csv(store: TaskStore, path: str | Path) -> ImportResult:
    """Create a task for every valid row; ids in the file are ignored."""
    created = 0
    skipped = 0
    with open(path, "r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for line_no, row in enumerate(reader, start=2):
            try:
                task = store.create(
                    row.get("title"),
                    row.get("description"),
                    row.get("deadline"),
                    row.get("priority"),
                )
            except ValidationError as exc:
                logger.warning("Skipping CSV line %d: %s", line_no, exc.message)
                skipped += 1
                continue
            if (row.get("completed") or "").strip().lower() in TRUE_VALUES:
                store.set_completed(task.id, True)
            created += 1
    logger.info("Imported %d tasks from %s (skipped %d)", created, path, skipped)
    return ImportResult(created=created, skipped=skipped)
