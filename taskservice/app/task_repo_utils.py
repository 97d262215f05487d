"""Helpers shared by the task store adapters."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from bson import ObjectId

TASK_FIELDS = ("title", "description", "status")

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def is_object_id(value: Any) -> bool:
    """True for a 24-character hex string, the only id shape the stores issue."""

    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def new_task_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str) and value:
        try:
            return _parse_timestamp(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def pick_task_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the user-editable task fields."""

    return {key: fields[key] for key in TASK_FIELDS if key in fields}


def normalize_task_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored document (Mongo, row or JSON file) to the common task shape."""

    task_id = doc.get("id", doc.get("_id"))
    return {
        "id": str(task_id) if task_id is not None else None,
        "title": doc.get("title"),
        "description": doc.get("description"),
        "status": doc.get("status"),
        "created_at": _parse_timestamp(doc.get("created_at", doc.get("createdAt"))),
        "updated_at": _parse_timestamp(doc.get("updated_at", doc.get("updatedAt"))),
    }


def sort_tasks_by_created(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return tasks in insertion order (oldest first), tolerating missing timestamps."""

    def sort_key(item: Dict[str, Any]) -> tuple[datetime, str]:
        created_at = _parse_timestamp(item.get("created_at"))
        return (created_at or datetime.min.replace(tzinfo=timezone.utc), str(item.get("id") or ""))

    return sorted(list(tasks or []), key=sort_key)
