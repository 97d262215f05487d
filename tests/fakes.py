# tests/fakes.py

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from taskservice.app.core.errors import StoreError
from taskservice.app.task_repo_utils import new_task_id, pick_task_fields


class InMemoryTaskRepository:
    """
    Dict-backed ITaskRepository for handler tests.

    - Each write advances a fake clock by one second, so timestamps are ordered
    - ``fail_on`` names operations that raise StoreError instead of running
    - ``calls`` records operation names in order
    """

    def __init__(self, fail_on: Optional[set[str]] = None) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.fail_on = set(fail_on or ())
        self.calls: list[str] = []
        self.closed = False
        self._now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def _tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def _enter(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise StoreError(f"{op} failed", cause=ConnectionError("store unreachable"))

    def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        self._enter("create")
        with self._lock:
            now = self._tick()
            doc = dict(pick_task_fields(fields), id=new_task_id(), created_at=now, updated_at=now)
            self.docs[doc["id"]] = doc
            return dict(doc)

    def list(self) -> list[dict[str, Any]]:
        self._enter("list")
        return [dict(doc) for doc in self.docs.values()]

    def get(self, task_id: str) -> Optional[dict[str, Any]]:
        self._enter("get")
        doc = self.docs.get(task_id)
        return dict(doc) if doc else None

    def find_by_title(self, title: str) -> Optional[dict[str, Any]]:
        self._enter("find_by_title")
        for doc in self.docs.values():
            if doc["title"] == title:
                return dict(doc)
        return None

    def replace(self, task_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        self._enter("replace")
        with self._lock:
            doc = self.docs.get(task_id)
            if doc is None:
                return None
            doc.update(pick_task_fields(fields))
            doc["updated_at"] = self._tick()
            return dict(doc)

    def delete(self, task_id: str) -> Optional[dict[str, Any]]:
        self._enter("delete")
        doc = self.docs.pop(task_id, None)
        return dict(doc) if doc else None

    def close(self) -> None:
        self.closed = True
