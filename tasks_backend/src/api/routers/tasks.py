from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..auth import require_user
from ..container import get_task_service
from ..models import AuthenticatedUser
from ..repositories import TaskPatch
from ..schemas import ErrorOut, TaskCreate, TaskOut, TaskUpdate
from ..task_service import TaskService

# Every route below sits behind the identity gate.
router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    dependencies=[Depends(require_user)],
    responses={401: {"model": ErrorOut, "description": "Missing, invalid or expired token"}},
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="List every task owned by the authenticated user.",
)
def list_tasks(
    user: AuthenticatedUser = Depends(require_user),
    service: TaskService = Depends(get_task_service),
) -> List[TaskOut]:
    """
    List the caller's tasks.
    """
    return [TaskOut(**t) for t in service.list(user.id)]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task owned by the authenticated user.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ErrorOut, "description": "Validation error"},
    },
)
def create_task(
    payload: TaskCreate,
    user: AuthenticatedUser = Depends(require_user),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    """
    Create a new task. The owner comes from the token, never the body.
    """
    created = service.create(user.id, payload.title, payload.description)
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update title, description and/or completion of a task.",
    responses={
        200: {"description": "Task updated"},
        400: {"model": ErrorOut, "description": "Invalid id or body, or task not found"},
    },
)
def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    user: AuthenticatedUser = Depends(require_user),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    """
    Partial update of a task.
    """
    patch = TaskPatch(
        title=payload.title,
        description=payload.description,
        description_set="description" in payload.model_fields_set,
        is_complete=payload.is_complete,
    )
    updated = service.update(str(task_id), patch, caller_id=user.id)
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=TaskOut,
    summary="Delete Task",
    description="Delete a task and return the deleted resource.",
    responses={
        200: {"description": "Task deleted"},
        400: {"model": ErrorOut, "description": "Invalid id or task not found"},
    },
)
def delete_task(
    task_id: UUID,
    user: AuthenticatedUser = Depends(require_user),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    """
    Delete a task. Returns the deleted row.
    """
    deleted = service.delete(str(task_id), caller_id=user.id)
    return TaskOut(**deleted)
