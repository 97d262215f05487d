from __future__ import annotations

from typing import Any, Optional


class TaskServiceError(Exception):
    """Base class for errors surfaced by the task endpoints."""

    status_code = 500


class ValidationError(TaskServiceError):
    """Raised when one or more field rules reject the request input."""

    status_code = 400

    def __init__(self, errors: list[Any]):
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = list(errors)


class NotFoundError(TaskServiceError):
    """Raised when a well-formed task id matches no stored document."""

    status_code = 404

    def __init__(self, task_id: str):
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class StoreError(TaskServiceError):
    """Raised when the task store fails (connectivity, timeout, bad data)."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
