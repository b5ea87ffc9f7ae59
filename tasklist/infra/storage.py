from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tasklist.domain.errors import PersistenceError

from .db import SessionLocal
from .models import KeyValueModel

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """Key-value storage backed by the kv_store table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read '{key}' from storage: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, key)
                if row is None:
                    session.add(KeyValueModel(key=key, value=value))
                else:
                    row.value = value
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not write '{key}' to storage: {exc}") from exc
        logger.debug("Stored key=%s bytes=%d", key, len(value))
