"""Port interface for task persistence (repository boundary)."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

TaskDocument = dict[str, Any]


@runtime_checkable
class ITaskRepository(Protocol):
    """Task store abstraction consumed by the request handlers.

    Every method returns normalized task documents with the keys
    ``id``, ``title``, ``description``, ``status``, ``created_at`` and
    ``updated_at``. Absence is signalled with ``None``; store failures are
    raised as :class:`taskservice.app.core.errors.StoreError`.
    """

    def create(self, fields: dict[str, Any]) -> TaskDocument:
        """Insert a new task and return the stored document."""

    def list(self) -> list[TaskDocument]:
        """Return every stored task."""

    def get(self, task_id: str) -> Optional[TaskDocument]:
        """Return a task by id or None when missing."""

    def find_by_title(self, title: str) -> Optional[TaskDocument]:
        """Return the first task with exactly this title, or None."""

    def replace(self, task_id: str, fields: dict[str, Any]) -> Optional[TaskDocument]:
        """Overwrite title/description/status and return the updated task."""

    def delete(self, task_id: str) -> Optional[TaskDocument]:
        """Remove a task and return the document as it was before deletion."""

    def close(self) -> None:
        """Release the underlying client or engine."""
