from __future__ import annotations

from enum import IntEnum, StrEnum


class StatusFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


class PriorityLevel(IntEnum):
    LOWEST = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5


MIN_PRIORITY = int(min(PriorityLevel))
MAX_PRIORITY = int(max(PriorityLevel))
DEFAULT_PRIORITY = PriorityLevel.MEDIUM
