"""Task store wiring: backend selection and the FastAPI dependency."""

from __future__ import annotations

import logging

from fastapi import Request

from taskservice.app.config import TASK_REPO_BACKENDS, Settings
from taskservice.ports.task_repository import ITaskRepository

logger = logging.getLogger(__name__)


def build_task_repository(settings: Settings) -> ITaskRepository:
    """Return the task repository implementation selected by TASK_REPO_BACKEND."""
    backend = (settings.task_repo_backend or "mongo").strip().lower()
    if backend not in TASK_REPO_BACKENDS:
        raise ValueError(
            f"unknown TASK_REPO_BACKEND {backend!r}; expected one of {', '.join(TASK_REPO_BACKENDS)}"
        )
    logger.info("TaskRepository backend=%s", backend, extra={"backend": backend})

    if backend == "sql":
        from taskservice.adapters.task_repository_sql import SqlTaskRepository

        return SqlTaskRepository.from_url(settings.database_url)
    if backend == "file":
        from taskservice.adapters.task_repository_file import FileTaskRepository

        return FileTaskRepository(settings.workspace_root)

    from taskservice.adapters.task_repository_mongo import MongoTaskRepository

    return MongoTaskRepository.from_url(
        settings.mongodb_url,
        settings.mongodb_database,
        settings.mongodb_collection,
        timeout_ms=settings.mongodb_timeout_ms,
    )


def get_task_repository(request: Request) -> ITaskRepository:
    """Return the store client wired into the running application."""
    return request.app.state.task_repository
