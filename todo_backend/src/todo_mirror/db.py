from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generator, List

from .errors import StorageFailure
from .models import StoreData, UserBucket
from .storage import StorageBackend, normalize_store


@dataclass(frozen=True)
class _Cols:
    meta: str = "store_meta"
    buckets: str = "buckets"
    todos: str = "todos"
    user_id: str = "user_id"
    position: str = "position"
    id: str = "id"
    todo: str = "todo"
    completed: str = "completed"
    owner_id: str = "owner_id"


_COLS = _Cols()


class SQLiteStorage(StorageBackend):
    """
    The store document kept in SQLite instead of a JSON file.

    Every write rewrites all three tables inside one transaction, matching
    the whole-document semantics of the file backend.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        try:
            self._init_db()
        except sqlite3.Error as exc:
            raise StorageFailure() from exc

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {_COLS.meta} (key TEXT PRIMARY KEY, value INTEGER NOT NULL)"
            )
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {_COLS.buckets} ({_COLS.user_id} TEXT PRIMARY KEY)"
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.todos} (
                    {_COLS.user_id} TEXT NOT NULL,
                    {_COLS.position} INTEGER NOT NULL,
                    {_COLS.id} INTEGER NOT NULL,
                    {_COLS.todo} TEXT NOT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.owner_id} INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.todos}_{_COLS.user_id} "
                f"ON {_COLS.todos}({_COLS.user_id}, {_COLS.position})"
            )

    def read(self) -> StoreData:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    f"SELECT value FROM {_COLS.meta} WHERE key = 'nextId'"
                ).fetchone()
                users: Dict[str, UserBucket] = {
                    str(r[_COLS.user_id]): {"todos": []}
                    for r in conn.execute(f"SELECT {_COLS.user_id} FROM {_COLS.buckets}")
                }
                rows: List[sqlite3.Row] = conn.execute(
                    f"SELECT * FROM {_COLS.todos} ORDER BY {_COLS.user_id}, {_COLS.position}"
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageFailure() from exc

        for r in rows:
            bucket = users.setdefault(str(r[_COLS.user_id]), {"todos": []})
            bucket["todos"].append(
                {
                    "id": int(r[_COLS.id]),
                    "todo": str(r[_COLS.todo]),
                    "completed": bool(r[_COLS.completed]),
                    "userId": int(r[_COLS.owner_id]),
                }
            )
        return normalize_store({"nextId": row["value"] if row else None, "users": users})

    def write(self, data: StoreData) -> None:
        try:
            with self._conn() as conn:
                conn.execute(f"DELETE FROM {_COLS.todos}")
                conn.execute(f"DELETE FROM {_COLS.buckets}")
                conn.execute(
                    f"INSERT OR REPLACE INTO {_COLS.meta} (key, value) VALUES ('nextId', ?)",
                    (int(data["nextId"]),),
                )
                for user_key, bucket in data["users"].items():
                    conn.execute(
                        f"INSERT INTO {_COLS.buckets} ({_COLS.user_id}) VALUES (?)", (user_key,)
                    )
                    conn.executemany(
                        f"""
                        INSERT INTO {_COLS.todos} ({_COLS.user_id}, {_COLS.position}, {_COLS.id},
                            {_COLS.todo}, {_COLS.completed}, {_COLS.owner_id})
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        [
                            (
                                user_key,
                                position,
                                int(t["id"]),
                                t["todo"],
                                1 if t["completed"] else 0,
                                int(t["userId"]),
                            )
                            for position, t in enumerate(bucket["todos"])
                        ],
                    )
        except sqlite3.Error as exc:
            raise StorageFailure() from exc
