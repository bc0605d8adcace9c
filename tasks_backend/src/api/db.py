from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import UserAlreadyExistsError
from .models import TaskEntity, UserEntity
from .repositories import TaskPatch, TaskRepository, UserRepository
from .utils import new_identifier, utc_now


@dataclass(frozen=True)
class _UserCols:
    table: str = "users"
    id: str = "id"
    username: str = "username"
    password: str = "password"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


@dataclass(frozen=True)
class _TaskCols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    is_complete: str = "is_complete"
    user_id: str = "user_id"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_USERS = _UserCols()
_TASKS = _TaskCols()


class SQLiteDatabase:
    """
    Owns the sqlite file and schema shared by the user and task repositories.
    Each operation runs on its own short-lived connection.
    """

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._timeout = timeout
        self._init_db()

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        # Foreign keys are off by default per connection.
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self.connect() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_USERS.table} (
                    {_USERS.id} TEXT PRIMARY KEY,
                    {_USERS.username} VARCHAR(50) NOT NULL UNIQUE,
                    {_USERS.password} VARCHAR(255) NOT NULL,
                    {_USERS.created_at} TEXT NOT NULL,
                    {_USERS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TASKS.table} (
                    {_TASKS.id} TEXT PRIMARY KEY,
                    {_TASKS.title} VARCHAR(100) NOT NULL,
                    {_TASKS.description} TEXT NULL,
                    {_TASKS.is_complete} INTEGER NOT NULL DEFAULT 0,
                    {_TASKS.user_id} TEXT NOT NULL
                        REFERENCES {_USERS.table}({_USERS.id}) ON DELETE CASCADE,
                    {_TASKS.created_at} TEXT NOT NULL,
                    {_TASKS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_TASKS.table}_user_id ON {_TASKS.table}({_TASKS.user_id})"
            )


def _parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


class SQLiteUserRepository(UserRepository):
    """
    SQLite-backed credential store.
    """

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def _row_to_entity(self, row: sqlite3.Row) -> UserEntity:
        return {
            "id": str(row[_USERS.id]),
            "username": str(row[_USERS.username]),
            "password_hash": str(row[_USERS.password]),
            "created_at": _parse_dt(row[_USERS.created_at]),
            "updated_at": _parse_dt(row[_USERS.updated_at]),
        }

    def create(self, username: str, password_hash: str) -> UserEntity:
        user_id = new_identifier()
        now = utc_now().isoformat()
        try:
            with self._db.connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_USERS.table} ({_USERS.id}, {_USERS.username}, {_USERS.password},
                        {_USERS.created_at}, {_USERS.updated_at})
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, username, password_hash, now, now),
                )
                row = conn.execute(
                    f"SELECT * FROM {_USERS.table} WHERE {_USERS.id} = ?", (user_id,)
                ).fetchone()
        except sqlite3.IntegrityError as e:
            raise UserAlreadyExistsError() from e
        assert row is not None
        return self._row_to_entity(row)

    def get(self, user_id: str) -> Optional[UserEntity]:
        with self._db.connect() as conn:
            row = conn.execute(f"SELECT * FROM {_USERS.table} WHERE {_USERS.id} = ?", (user_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def get_by_username(self, username: str) -> Optional[UserEntity]:
        # sqlite's default BINARY collation keeps '=' case-sensitive
        with self._db.connect() as conn:
            row = conn.execute(
                f"SELECT * FROM {_USERS.table} WHERE {_USERS.username} = ?", (username,)
            ).fetchone()
            return self._row_to_entity(row) if row else None

    def delete(self, user_id: str) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(f"DELETE FROM {_USERS.table} WHERE {_USERS.id} = ?", (user_id,))
            return cur.rowcount > 0


class SQLiteTaskRepository(TaskRepository):
    """
    SQLite-backed task store.
    """

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_TASKS.id]),
            "title": str(row[_TASKS.title]),
            "description": row[_TASKS.description] if row[_TASKS.description] is not None else None,
            "is_complete": bool(row[_TASKS.is_complete]),
            "user_id": str(row[_TASKS.user_id]),
            "created_at": _parse_dt(row[_TASKS.created_at]),
            "updated_at": _parse_dt(row[_TASKS.updated_at]),
        }

    def _select(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_TASKS.table} WHERE {_TASKS.id} = ?", (task_id,)).fetchone()

    def create(self, user_id: str, title: str, description: Optional[str] = None) -> TaskEntity:
        task_id = new_identifier()
        now = utc_now().isoformat()
        with self._db.connect() as conn:
            conn.execute(
                f"""
                INSERT INTO {_TASKS.table} ({_TASKS.id}, {_TASKS.title}, {_TASKS.description},
                    {_TASKS.is_complete}, {_TASKS.user_id}, {_TASKS.created_at}, {_TASKS.updated_at})
                VALUES (?, ?, ?, 0, ?, ?, ?)
                """,
                (task_id, title, description, user_id, now, now),
            )
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._db.connect() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        with self._db.connect() as conn:
            row = self._select(conn, task_id)
            if not row:
                return None
            current = self._row_to_entity(row)

            title = patch.title if patch.title is not None else current["title"]
            description = patch.description if patch.description_set else current["description"]
            is_complete = patch.is_complete if patch.is_complete is not None else current["is_complete"]
            conn.execute(
                f"""
                UPDATE {_TASKS.table}
                SET {_TASKS.title} = ?, {_TASKS.description} = ?, {_TASKS.is_complete} = ?,
                    {_TASKS.updated_at} = ?
                WHERE {_TASKS.id} = ?
                """,
                (title, description, 1 if is_complete else 0, utc_now().isoformat(), task_id),
            )
            row2 = self._select(conn, task_id)
            assert row2 is not None
            return self._row_to_entity(row2)

    def delete(self, task_id: str) -> Optional[TaskEntity]:
        with self._db.connect() as conn:
            row = self._select(conn, task_id)
            if not row:
                return None
            conn.execute(f"DELETE FROM {_TASKS.table} WHERE {_TASKS.id} = ?", (task_id,))
            return self._row_to_entity(row)

    def list_for_user(self, user_id: str) -> List[TaskEntity]:
        with self._db.connect() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_TASKS.table}
                WHERE {_TASKS.user_id} = ?
                ORDER BY {_TASKS.created_at} ASC, rowid ASC
                """,
                (user_id,),
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
