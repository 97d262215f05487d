"""Task CRUD router: validate, run one store operation, serialize."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from taskservice.app.core.errors import NotFoundError
from taskservice.app.deps import get_task_repository
from taskservice.app.schemas import ServerErrorResponse, TaskOut, ValidationErrorResponse
from taskservice.app.validation import (
    CREATE_TASK_RULES,
    TASK_ID_RULES,
    UPDATE_TASK_RULES,
    raise_for_errors,
    validate,
)
from taskservice.ports.task_repository import ITaskRepository, TaskDocument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ValidationErrorResponse},
    500: {"model": ServerErrorResponse},
}
_ID_RESPONSES: dict[int | str, dict[str, Any]] = {
    **_ERROR_RESPONSES,
    404: {"description": "Task not found (empty object)"},
}


async def json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; anything else counts as empty."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _found(task: TaskDocument | None, task_id: str) -> TaskDocument:
    if task is None:
        raise NotFoundError(task_id)
    return task


@router.post("", status_code=201, response_model=TaskOut, responses=_ERROR_RESPONSES)
def create_task(
    payload: dict[str, Any] = Depends(json_body),
    repo: ITaskRepository = Depends(get_task_repository),
):
    """Validate the body (including title uniqueness) and insert a new task."""

    checked = validate(payload, CREATE_TASK_RULES, repository=repo)
    raise_for_errors(checked)

    task = repo.create(checked.values)
    logger.info("task created", extra={"task": task["id"], "op": "create"})
    return task


@router.get("", response_model=list[TaskOut], responses={500: {"model": ServerErrorResponse}})
def list_tasks(repo: ITaskRepository = Depends(get_task_repository)):
    return repo.list()


@router.get("/{task_id}", response_model=TaskOut, responses=_ID_RESPONSES)
def get_task(task_id: str, repo: ITaskRepository = Depends(get_task_repository)):
    raise_for_errors(validate({"id": task_id}, TASK_ID_RULES))
    return _found(repo.get(task_id), task_id)


@router.put("/{task_id}", response_model=TaskOut, responses=_ID_RESPONSES)
def update_task(
    task_id: str,
    payload: dict[str, Any] = Depends(json_body),
    repo: ITaskRepository = Depends(get_task_repository),
):
    """Replace title, description and status; uniqueness is not re-checked."""

    checked = validate(payload, UPDATE_TASK_RULES)
    raise_for_errors(validate({"id": task_id}, TASK_ID_RULES), checked)

    task = _found(repo.replace(task_id, checked.values), task_id)
    logger.info("task updated", extra={"task": task_id, "op": "update"})
    return task


@router.delete("/{task_id}", response_model=TaskOut, responses=_ID_RESPONSES)
def delete_task(task_id: str, repo: ITaskRepository = Depends(get_task_repository)):
    raise_for_errors(validate({"id": task_id}, TASK_ID_RULES))

    task = _found(repo.delete(task_id), task_id)
    logger.info("task deleted", extra={"task": task_id, "op": "delete"})
    return task


__all__ = ["router", "json_body"]
