import pytest

from src.api.db import SQLiteDatabase, SQLiteTaskRepository, SQLiteUserRepository
from src.api.errors import UserAlreadyExistsError
from src.api.repositories import (
    InMemoryTaskRepository,
    InMemoryUserRepository,
    TaskPatch,
    get_repositories,
)


@pytest.fixture(params=["memory", "sqlite"])
def repos(request, tmp_path):
    if request.param == "sqlite":
        database = SQLiteDatabase(str(tmp_path / "tasks.db"))
        return SQLiteUserRepository(database), SQLiteTaskRepository(database)
    tasks = InMemoryTaskRepository()
    return InMemoryUserRepository(tasks), tasks


class TestUserRepository:
    def test_create_and_lookup(self, repos):
        users, _ = repos
        created = users.create("alice", "hash")
        assert users.get(created["id"]) == created
        assert users.get_by_username("alice") == created
        assert created["password_hash"] == "hash"

    def test_username_lookup_is_case_sensitive(self, repos):
        users, _ = repos
        users.create("alice", "hash")
        assert users.get_by_username("Alice") is None

    def test_duplicate_username_is_rejected(self, repos):
        users, _ = repos
        users.create("alice", "hash")
        with pytest.raises(UserAlreadyExistsError):
            users.create("alice", "other")

    def test_delete_cascades_to_tasks(self, repos):
        users, tasks = repos
        alice = users.create("alice", "hash")
        bob = users.create("bob", "hash")
        tasks.create(alice["id"], "Alice's task")
        kept = tasks.create(bob["id"], "Bob's task")

        assert users.delete(alice["id"]) is True
        assert users.get(alice["id"]) is None
        assert tasks.list_for_user(alice["id"]) == []
        assert tasks.list_for_user(bob["id"]) == [kept]
        assert users.delete(alice["id"]) is False


class TestTaskRepository:
    def test_list_is_scoped_and_in_insertion_order(self, repos):
        users, tasks = repos
        alice = users.create("alice", "hash")
        bob = users.create("bob", "hash")
        first = tasks.create(alice["id"], "First")
        tasks.create(bob["id"], "Other")
        second = tasks.create(alice["id"], "Second", "details")

        listed = tasks.list_for_user(alice["id"])
        assert [t["id"] for t in listed] == [first["id"], second["id"]]
        assert listed[1]["description"] == "details"
        assert all(t["is_complete"] is False for t in listed)

    def test_update_applies_only_given_fields(self, repos):
        users, tasks = repos
        alice = users.create("alice", "hash")
        task = tasks.create(alice["id"], "Title", "Desc")

        updated = tasks.update(task["id"], TaskPatch(is_complete=True))
        assert updated["is_complete"] is True
        assert updated["title"] == "Title"
        assert updated["description"] == "Desc"
        assert updated["user_id"] == alice["id"]
        assert updated["updated_at"] >= task["updated_at"]

        cleared = tasks.update(task["id"], TaskPatch(description=None, description_set=True))
        assert cleared["description"] is None
        assert cleared["is_complete"] is True

    def test_update_missing_returns_none(self, repos):
        _, tasks = repos
        assert tasks.update("00000000-0000-4000-8000-000000000000", TaskPatch(title="x")) is None

    def test_delete_returns_removed_row(self, repos):
        users, tasks = repos
        alice = users.create("alice", "hash")
        task = tasks.create(alice["id"], "Gone soon")

        deleted = tasks.delete(task["id"])
        assert deleted["id"] == task["id"]
        assert deleted["title"] == "Gone soon"
        assert tasks.get(task["id"]) is None
        assert tasks.delete(task["id"]) is None


class TestFactory:
    def test_memory_backend(self, settings):
        users, tasks = get_repositories(settings)
        assert isinstance(users, InMemoryUserRepository)
        assert isinstance(tasks, InMemoryTaskRepository)

    def test_sqlite_backend(self, settings, tmp_path):
        from dataclasses import replace

        sqlite_settings = replace(
            settings, persistence_backend="sqlite", sqlite_db_path=str(tmp_path / "nested" / "tasks.db")
        )
        users, tasks = get_repositories(sqlite_settings)
        assert isinstance(users, SQLiteUserRepository)
        assert isinstance(tasks, SQLiteTaskRepository)
        assert (tmp_path / "nested" / "tasks.db").exists()
