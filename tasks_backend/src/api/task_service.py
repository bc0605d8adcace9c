from __future__ import annotations

import logging
from typing import List, Optional

from .errors import TaskNotFoundError
from .models import TaskEntity
from .repositories import TaskPatch, TaskRepository

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskService:
    """
    Task CRUD on top of a TaskRepository.

    list/create are always scoped to the owner passed in by the caller.
    update/delete address tasks by id only; unless ``enforce_ownership`` is
    set they do not check that the task belongs to ``caller_id``.
    """

    def __init__(self, tasks: TaskRepository, enforce_ownership: bool = False) -> None:
        self._tasks = tasks
        self._enforce_ownership = enforce_ownership

    def list(self, owner_id: str) -> List[TaskEntity]:
        return self._tasks.list_for_user(owner_id)

    def create(self, owner_id: str, title: str, description: Optional[str] = None) -> TaskEntity:
        if not title:
            raise ValueError("title is required")
        task = self._tasks.create(owner_id, title, description)
        logger.debug("Created task %s for %s", task["id"], owner_id)
        return task

    def _check_owner(self, task_id: str, caller_id: Optional[str]) -> None:
        if not self._enforce_ownership:
            return
        existing = self._tasks.get(task_id)
        # Someone else's task is reported exactly like a missing one.
        if existing is None or existing["user_id"] != caller_id:
            raise TaskNotFoundError()

    def update(self, task_id: str, patch: TaskPatch, caller_id: Optional[str] = None) -> TaskEntity:
        """
        Partially update a task.

        Raises:
            TaskNotFoundError if task_id does not exist (or, with ownership
            enforcement, belongs to another user).
        """
        self._check_owner(task_id, caller_id)
        updated = self._tasks.update(task_id, patch)
        if updated is None:
            raise TaskNotFoundError()
        return updated

    def delete(self, task_id: str, caller_id: Optional[str] = None) -> TaskEntity:
        """Delete a task and return the deleted row. Same errors as update."""
        self._check_owner(task_id, caller_id)
        deleted = self._tasks.delete(task_id)
        if deleted is None:
            raise TaskNotFoundError()
        logger.debug("Deleted task %s", task_id)
        return deleted
