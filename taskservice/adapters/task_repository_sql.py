"""SQLAlchemy-backed task repository (relational fallback store)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskservice.app import models
from taskservice.app.core.errors import StoreError
from taskservice.app.db import Base, make_engine, make_session_factory
from taskservice.app.task_repo_utils import (
    new_task_id,
    normalize_task_document,
    pick_task_fields,
    utcnow,
)
from taskservice.ports.task_repository import ITaskRepository, TaskDocument

logger = logging.getLogger(__name__)


def _to_document(row: models.Task) -> TaskDocument:
    return normalize_task_document(
        {
            "id": row.id,
            "title": row.title,
            "description": row.description,
            "status": row.status,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


class SqlTaskRepository(ITaskRepository):
    """Task repository on a ``tasks`` table; timestamps come from column defaults."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlTaskRepository":
        engine = make_engine(database_url)
        # Initialize schema on boot (no-op if the table already exists)
        Base.metadata.create_all(bind=engine)
        logger.info("SQL task store ready", extra={"backend": "sql"})
        return cls(engine)

    @contextmanager
    def _session(self, op: str) -> Iterator[Session]:
        session: Session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(f"{op} failed", cause=exc) from exc
        finally:
            session.close()

    def create(self, fields: dict[str, Any]) -> TaskDocument:
        with self._session("insert") as session:
            now = utcnow()
            row = models.Task(
                id=new_task_id(),
                created_at=now,
                updated_at=now,
                **pick_task_fields(fields),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_document(row)

    def list(self) -> list[TaskDocument]:
        with self._session("list") as session:
            rows = session.query(models.Task).order_by(models.Task.created_at, models.Task.id).all()
            return [_to_document(row) for row in rows]

    def get(self, task_id: str) -> Optional[TaskDocument]:
        with self._session("get") as session:
            row = session.get(models.Task, task_id)
            return _to_document(row) if row else None

    def find_by_title(self, title: str) -> Optional[TaskDocument]:
        with self._session("title lookup") as session:
            row = session.query(models.Task).filter(models.Task.title == title).first()
            return _to_document(row) if row else None

    def replace(self, task_id: str, fields: dict[str, Any]) -> Optional[TaskDocument]:
        with self._session("update") as session:
            row = session.get(models.Task, task_id)
            if row is None:
                return None
            for key, value in pick_task_fields(fields).items():
                setattr(row, key, value)
            # onupdate only fires for dirty rows
            row.updated_at = utcnow()
            session.commit()
            session.refresh(row)
            return _to_document(row)

    def delete(self, task_id: str) -> Optional[TaskDocument]:
        with self._session("delete") as session:
            row = session.get(models.Task, task_id)
            if row is None:
                return None
            document = _to_document(row)
            session.delete(row)
            session.commit()
            return document

    def close(self) -> None:
        self._engine.dispose()
