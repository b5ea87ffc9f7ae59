from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import MAX_PRIORITY, MIN_PRIORITY, StatusFilter
from .errors import ValidationError


@dataclass(frozen=True)
class FilterState:
    status: StatusFilter = StatusFilter.ALL
    priority: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            status = StatusFilter(self.status)
        except ValueError:
            raise ValidationError("status_filter", f"Unknown status filter: {self.status!r}") from None
        object.__setattr__(self, "status", status)

        if self.priority is None:
            return
        if (
            isinstance(self.priority, bool)
            or not isinstance(self.priority, int)
            or not MIN_PRIORITY <= self.priority <= MAX_PRIORITY
        ):
            raise ValidationError(
                "priority_filter",
                f"Priority filter must be between {MIN_PRIORITY} and {MAX_PRIORITY}",
            )
