"""File-backed task repository: one JSON document per task."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

from taskservice.app.core.errors import StoreError
from taskservice.app.task_repo_utils import (
    is_object_id,
    new_task_id,
    normalize_task_document,
    pick_task_fields,
    sort_tasks_by_created,
    utcnow,
)
from taskservice.ports.task_repository import ITaskRepository, TaskDocument

logger = logging.getLogger(__name__)


def _task_path(base: Path, task_id: str) -> Path:
    return base / "tasks" / f"{task_id}.json"


def _atomic_write(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    data = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
    with open(tmp_path, "wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _load_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _serialize(doc: TaskDocument) -> dict[str, Any]:
    payload = dict(doc)
    payload["created_at"] = doc["created_at"].isoformat()
    payload["updated_at"] = doc["updated_at"].isoformat()
    return payload


class FileTaskRepository(ITaskRepository):
    """Task repository persisted as JSON files under ``<root>/tasks``."""

    def __init__(self, root: str | Path) -> None:
        self._base = Path(root)
        self._lock = threading.RLock()

    def _read(self, task_id: str) -> Optional[TaskDocument]:
        if not is_object_id(task_id):
            return None
        path = _task_path(self._base, task_id)
        if not path.exists():
            return None
        return normalize_task_document(_load_json(path))

    def _write(self, doc: TaskDocument) -> None:
        _atomic_write(_task_path(self._base, doc["id"]), _serialize(doc))

    def create(self, fields: dict[str, Any]) -> TaskDocument:
        now = utcnow()
        doc = dict(pick_task_fields(fields), id=new_task_id(), created_at=now, updated_at=now)
        doc = normalize_task_document(doc)
        try:
            with self._lock:
                self._write(doc)
        except OSError as exc:
            raise StoreError("write failed", cause=exc) from exc
        return doc

    def list(self) -> list[TaskDocument]:
        base = self._base / "tasks"
        if not base.exists():
            return []
        try:
            with self._lock:
                docs = [normalize_task_document(_load_json(path)) for path in base.glob("*.json")]
        except (OSError, ValueError) as exc:
            raise StoreError("read failed", cause=exc) from exc
        return sort_tasks_by_created(docs)

    def get(self, task_id: str) -> Optional[TaskDocument]:
        try:
            with self._lock:
                return self._read(task_id)
        except (OSError, ValueError) as exc:
            raise StoreError("read failed", cause=exc) from exc

    def find_by_title(self, title: str) -> Optional[TaskDocument]:
        for doc in self.list():
            if doc["title"] == title:
                return doc
        return None

    def replace(self, task_id: str, fields: dict[str, Any]) -> Optional[TaskDocument]:
        try:
            with self._lock:
                current = self._read(task_id)
                if current is None:
                    return None
                updated = dict(current)
                updated.update(pick_task_fields(fields))
                updated["updated_at"] = utcnow()
                self._write(updated)
        except (OSError, ValueError) as exc:
            raise StoreError("update failed", cause=exc) from exc
        return updated

    def delete(self, task_id: str) -> Optional[TaskDocument]:
        try:
            with self._lock:
                current = self._read(task_id)
                if current is None:
                    return None
                _task_path(self._base, task_id).unlink()
        except (OSError, ValueError) as exc:
            raise StoreError("delete failed", cause=exc) from exc
        return current

    def close(self) -> None:
        logger.debug("file task store closed", extra={"backend": "file"})
