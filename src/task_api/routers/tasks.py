from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ..repositories import Repository, get_repository
from ..schemas import DetailResponse, ErrorsResponse, ServerErrorResponse, TaskOut
from ..validators import TaskValidator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])

_NOT_FOUND = "Task not found"

_ERROR_RESPONSES = {
    400: {"model": ErrorsResponse, "description": "Validation error"},
    500: {"model": ServerErrorResponse, "description": "Task store failure"},
}
_ID_RESPONSES = {
    **_ERROR_RESPONSES,
    404: {"model": DetailResponse, "description": "Task not found"},
}

_TASK_BODY_EXAMPLE = {
    "title": "Buy groceries",
    "description": "Milk, eggs, bread",
    "status": "pending",
}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _get_validator(repo: Repository = Depends(_get_repo)) -> TaskValidator:
    return TaskValidator(repo)


# PUBLIC_INTERFACE
@router.post(
    "/create-tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Validate and store a new task. Titles must be unique.",
    responses=_ERROR_RESPONSES,
)
def create_task(
    payload: Dict[str, Any] = Body(..., examples=[_TASK_BODY_EXAMPLE]),
    repo: Repository = Depends(_get_repo),
    validator: TaskValidator = Depends(_get_validator),
) -> TaskOut:
    """
    Create a new task.
    """
    data = validator.validate_create(payload)
    created = repo.create(data)
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/all-tasks",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every stored task.",
    responses={500: _ERROR_RESPONSES[500]},
)
def list_tasks(repo: Repository = Depends(_get_repo)) -> List[TaskOut]:
    return [TaskOut(**t) for t in repo.list()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/single-task/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by its ObjectId.",
    responses=_ID_RESPONSES,
)
def get_task(
    task_id: str,
    repo: Repository = Depends(_get_repo),
    validator: TaskValidator = Depends(_get_validator),
) -> TaskOut:
    validator.validate_id(task_id)
    item = repo.get(task_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return TaskOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/update-task/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Update the provided fields of a task. Omitted fields keep their value; "
        "provided fields follow the same rules as on creation."
    ),
    responses=_ID_RESPONSES,
)
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(..., examples=[{"status": "in progress"}]),
    repo: Repository = Depends(_get_repo),
    validator: TaskValidator = Depends(_get_validator),
) -> TaskOut:
    """
    Partial update of a task. Changing the title to one used by another task is a 400.
    """
    data = validator.validate_update(task_id, payload)
    updated = repo.update(task_id, data)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/remove-task/{task_id}",
    response_model=TaskOut,
    summary="Delete Task",
    description="Delete a task by its ObjectId and return the removed record.",
    responses=_ID_RESPONSES,
)
def delete_task(
    task_id: str,
    repo: Repository = Depends(_get_repo),
    validator: TaskValidator = Depends(_get_validator),
) -> TaskOut:
    validator.validate_id(task_id)
    removed = repo.delete(task_id)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    logger.debug("Removed task id=%s", task_id)
    return TaskOut(**removed)  # type: ignore[arg-type]
