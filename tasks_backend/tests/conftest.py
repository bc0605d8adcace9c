from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.keys import KeyPair, generate_key_pair

# Keys must exist before src.api.main is imported anywhere: building the app
# loads them and fails hard when they are missing.
_KEY_DIR = tempfile.mkdtemp(prefix="tasks-backend-keys-")
_KEY_PAIR = generate_key_pair(_KEY_DIR)
os.environ["JWT_KEY_DIR"] = _KEY_DIR
os.environ["PERSISTENCE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"

from src.api.main import create_app  # noqa: E402
from src.api.repositories import InMemoryTaskRepository, TaskPatch  # noqa: E402
from src.api.settings import Settings, get_settings  # noqa: E402
from src.api.task_service import TaskService  # noqa: E402

VALID_PASSWORD = "Passw0rd!"


class RecordingTaskService(TaskService):
    """
    TaskService that records every call before delegating to an in-memory
    store, so tests can assert a call never happened.
    """

    def __init__(self) -> None:
        super().__init__(InMemoryTaskRepository())
        self.calls: List[Tuple[str, tuple]] = []

    def list(self, owner_id: str):
        self.calls.append(("list", (owner_id,)))
        return super().list(owner_id)

    def create(self, owner_id: str, title: str, description: Optional[str] = None):
        self.calls.append(("create", (owner_id, title, description)))
        return super().create(owner_id, title, description)

    def update(self, task_id: str, patch: TaskPatch, caller_id: Optional[str] = None):
        self.calls.append(("update", (task_id, patch, caller_id)))
        return super().update(task_id, patch, caller_id)

    def delete(self, task_id: str, caller_id: Optional[str] = None):
        self.calls.append(("delete", (task_id, caller_id)))
        return super().delete(task_id, caller_id)


@pytest.fixture()
def key_dir() -> str:
    return _KEY_DIR


@pytest.fixture()
def key_pair() -> KeyPair:
    return _KEY_PAIR


@pytest.fixture()
def settings() -> Settings:
    return get_settings()


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    """A fresh app with empty in-memory stores for each test."""
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def hardened_client(settings: Settings) -> TestClient:
    return TestClient(create_app(replace(settings, enforce_task_ownership=True)))


@pytest.fixture()
def recording_service() -> RecordingTaskService:
    return RecordingTaskService()


@pytest.fixture()
def register() -> Callable[..., Dict[str, str]]:
    """Register a user through the API and return the {id, username, token} body."""

    def _register(client: TestClient, username: str = "alice", password: str = VALID_PASSWORD) -> Dict[str, str]:
        res = client.post("/auth/register", json={"username": username, "password": password})
        assert res.status_code == 201, res.text
        return res.json()

    return _register
