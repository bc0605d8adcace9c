from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Dict, List, Optional, Tuple

from .errors import UserAlreadyExistsError
from .models import TaskEntity, UserEntity
from .settings import Settings
from .utils import new_identifier, utc_now


@dataclass(frozen=True)
class TaskPatch:
    """
    Fields to change on a task. ``description`` is only applied when
    ``description_set`` is true, so an explicit null clears it.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    description_set: bool = False
    is_complete: Optional[bool] = None


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract credential store contract."""

    @abstractmethod
    def create(self, username: str, password_hash: str) -> UserEntity:
        """Create and return a new user. Usernames are unique."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserEntity]:
        """Return a user by id, or None if not found."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[UserEntity]:
        """Return a user by exact (case-sensitive) username, or None."""

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Delete a user and, by cascade, all of their tasks."""


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract task store contract."""

    @abstractmethod
    def create(self, user_id: str, title: str, description: Optional[str] = None) -> TaskEntity:
        """Create and return a new task owned by user_id."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        """Apply patch to an existing task. Return the updated task or None if not found."""

    @abstractmethod
    def delete(self, task_id: str) -> Optional[TaskEntity]:
        """Delete a task by id. Return the deleted task, or None if not found."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[TaskEntity]:
        """Return all tasks owned by user_id in insertion order."""


class InMemoryTaskRepository(TaskRepository):
    """
    Thread-safe in-memory task store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        # dicts keep insertion order, which is the listing order
        self._items: Dict[str, TaskEntity] = {}

    def create(self, user_id: str, title: str, description: Optional[str] = None) -> TaskEntity:
        now = utc_now()
        entity: TaskEntity = {
            "id": new_identifier(),
            "title": title,
            "description": description,
            "is_complete": False,
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            if patch.title is not None:
                updated["title"] = patch.title
            if patch.description_set:
                updated["description"] = patch.description
            if patch.is_complete is not None:
                updated["is_complete"] = patch.is_complete
            updated["updated_at"] = utc_now()

            self._items[task_id] = updated
            return updated.copy()

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            return self._items.pop(task_id, None)

    def delete_for_user(self, user_id: str) -> int:
        with self._lock:
            doomed = [tid for tid, t in self._items.items() if t["user_id"] == user_id]
            for tid in doomed:
                del self._items[tid]
            return len(doomed)

    def list_for_user(self, user_id: str) -> List[TaskEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values() if t["user_id"] == user_id]


class InMemoryUserRepository(UserRepository):
    """
    Thread-safe in-memory credential store. Deleting a user cascades to the
    task store it was built with.
    """

    def __init__(self, tasks: Optional[InMemoryTaskRepository] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, UserEntity] = {}
        self._tasks = tasks

    def create(self, username: str, password_hash: str) -> UserEntity:
        now = utc_now()
        entity: UserEntity = {
            "id": new_identifier(),
            "username": username,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            if any(u["username"] == username for u in self._items.values()):
                raise UserAlreadyExistsError()
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            item = self._items.get(user_id)
            return None if item is None else item.copy()

    def get_by_username(self, username: str) -> Optional[UserEntity]:
        with self._lock:
            for item in self._items.values():
                if item["username"] == username:
                    return item.copy()
            return None

    def delete(self, user_id: str) -> bool:
        with self._lock:
            removed = self._items.pop(user_id, None) is not None
        if removed and self._tasks is not None:
            self._tasks.delete_for_user(user_id)
        return removed


# PUBLIC_INTERFACE
def get_repositories(settings: Settings) -> Tuple[UserRepository, TaskRepository]:
    """
    Factory returning the configured (users, tasks) repositories.
    - memory: InMemoryUserRepository / InMemoryTaskRepository
    - sqlite: SQLiteUserRepository / SQLiteTaskRepository sharing one database file
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteDatabase, SQLiteTaskRepository, SQLiteUserRepository

        database = SQLiteDatabase(settings.sqlite_db_path, timeout=settings.sqlite_timeout_seconds)
        return SQLiteUserRepository(database), SQLiteTaskRepository(database)
    tasks = InMemoryTaskRepository()
    return InMemoryUserRepository(tasks), tasks
