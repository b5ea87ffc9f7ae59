"""
Ports used by the task engine.

The store depends on these Protocols rather than on SQLAlchemy, so tests can
hand it an in-memory adapter.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .entities import TaskEntity


class KeyValueStore(Protocol):
    """Synchronous string storage; set replaces the whole value."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...


class PersistenceAdapter(Protocol):
    def load(self) -> Optional[list[TaskEntity]]: ...
    def save(self, tasks: Sequence[TaskEntity]) -> None: ...
