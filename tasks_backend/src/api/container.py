from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from .auth_service import AuthService
from .keys import load_key_pair
from .passwords import PasswordHasher
from .repositories import TaskRepository, UserRepository, get_repositories
from .settings import Settings
from .task_service import TaskService
from .tokens import TokenService


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Container:
    """Process-wide services, built once per app and never mutated."""

    settings: Settings
    users: UserRepository
    tasks: TaskRepository
    tokens: TokenService
    auth: AuthService
    task_service: TaskService


# PUBLIC_INTERFACE
def build_container(settings: Settings) -> Container:
    """
    Wire repositories and services from settings.

    Raises:
        KeyMaterialError if the signing key pair cannot be loaded.
    """
    keys = load_key_pair(settings.jwt_key_dir)
    tokens = TokenService(keys, ttl_seconds=settings.jwt_ttl_seconds)
    users, tasks = get_repositories(settings)
    return Container(
        settings=settings,
        users=users,
        tasks=tasks,
        tokens=tokens,
        auth=AuthService(users, PasswordHasher(rounds=settings.bcrypt_rounds), tokens),
        task_service=TaskService(tasks, enforce_ownership=settings.enforce_task_ownership),
    )


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_auth_service(container: Container = Depends(get_container)) -> AuthService:
    return container.auth


def get_task_service(container: Container = Depends(get_container)) -> TaskService:
    return container.task_service
