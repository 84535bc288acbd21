from __future__ import annotations

from threading import RLock
from typing import List, Optional

import structlog

from .models import StoreData, TodoEntity, bucket_key
from .schemas import TodoCreate, TodoUpdate
from .storage import StorageBackend
from .upstream import UpstreamClient

log = structlog.get_logger()

# One lock per process: every TodoCache built per request shares it.
_STORE_LOCK = RLock()


# PUBLIC_INTERFACE
class TodoCache:
    """
    Per-user read-through cache of upstream todos.

    A user's bucket is filled from upstream exactly once (hydration); after
    that every operation is local. Each call reads the whole store, works on
    that copy and writes the whole store back only when something changed.

    Ids come from one counter shared by all users. ``nextId`` starts at 1 and
    only moves forward, so ids are never reused, even after deletion.
    """

    def __init__(self, storage: StorageBackend, upstream: UpstreamClient) -> None:
        self._storage = storage
        self._upstream = upstream
        self._lock = _STORE_LOCK

    def _read(self) -> StoreData:
        with self._lock:
            return self._storage.read()

    def _write(self, data: StoreData) -> None:
        self._storage.write(data)

    def ensure_hydrated(self, token: str) -> int:
        """Resolve the token's user upstream, hydrate that user and return the id."""
        user = self._upstream.me(token)
        return self.hydrate(int(user["id"]), token)

    def hydrate(self, user_id: int, token: str) -> int:
        """Create the user's bucket from upstream if it does not exist yet."""
        key = bucket_key(user_id)
        if key in self._read()["users"]:
            return user_id

        todos = self._upstream.fetch_all_todos(user_id, token)
        with self._lock:
            data = self._read()
            if key in data["users"]:
                return user_id
            data["users"][key] = {"todos": todos}
            for t in todos:
                if t["id"] >= data["nextId"]:
                    data["nextId"] = t["id"] + 1
            self._write(data)
        log.info("user_hydrated", user_id=user_id, todos=len(todos))
        return user_id

    def list(self, user_id: int) -> List[TodoEntity]:
        bucket = self._read()["users"].get(bucket_key(user_id))
        return [] if bucket is None else bucket["todos"]

    def get(self, user_id: int, todo_id: int) -> Optional[TodoEntity]:
        for t in self.list(user_id):
            if t["id"] == todo_id:
                return t
        return None

    def create(self, user_id: int, data: TodoCreate) -> TodoEntity:
        with self._lock:
            store = self._read()
            bucket = store["users"].setdefault(bucket_key(user_id), {"todos": []})
            entity: TodoEntity = {
                "id": store["nextId"],
                "todo": data.todo,
                "completed": data.completed,
                "userId": user_id,
            }
            store["nextId"] += 1
            # Most recent first.
            bucket["todos"].insert(0, entity)
            self._write(store)
        log.info("todo_created", user_id=user_id, todo_id=entity["id"])
        return entity

    def update(self, user_id: int, todo_id: int, data: TodoUpdate) -> Optional[TodoEntity]:
        with self._lock:
            store = self._read()
            bucket = store["users"].get(bucket_key(user_id))
            if bucket is None:
                return None
            for index, existing in enumerate(bucket["todos"]):
                if existing["id"] != todo_id:
                    continue
                # Update only provided fields
                updated = existing.copy()
                if data.todo is not None:
                    updated["todo"] = data.todo
                if data.completed is not None:
                    updated["completed"] = data.completed
                bucket["todos"][index] = updated
                self._write(store)
                break
            else:
                return None
        log.info("todo_updated", user_id=user_id, todo_id=todo_id)
        return updated

    def delete(self, user_id: int, todo_id: int) -> bool:
        with self._lock:
            store = self._read()
            bucket = store["users"].get(bucket_key(user_id))
            if bucket is None:
                return False
            remaining = [t for t in bucket["todos"] if t["id"] != todo_id]
            if len(remaining) == len(bucket["todos"]):
                return False
            bucket["todos"] = remaining
            self._write(store)
        log.info("todo_deleted", user_id=user_id, todo_id=todo_id)
        return True
