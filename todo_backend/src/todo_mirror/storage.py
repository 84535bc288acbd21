from __future__ import annotations

import copy
import json
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Optional

from .errors import StorageFailure
from .models import StoreData, empty_store
from .settings import get_settings


def normalize_store(data: Optional[dict]) -> StoreData:
    """
    Coerce a loaded document into a StoreData.

    A missing or non-positive ``nextId`` is rebuilt from the largest id
    present, so ids stay positive and never collide.
    """
    if not isinstance(data, dict):
        return empty_store()
    users = data.get("users")
    if not isinstance(users, dict):
        users = {}
    users = {str(k): {"todos": list((v or {}).get("todos") or [])} for k, v in users.items()}

    next_id = data.get("nextId")
    if not isinstance(next_id, int) or next_id < 1:
        max_id = 0
        for bucket in users.values():
            for todo in bucket["todos"]:
                max_id = max(max_id, int(todo["id"]))
        next_id = max_id + 1
    return {"nextId": next_id, "users": users}


# PUBLIC_INTERFACE
class StorageBackend(ABC):
    """Whole-document persistence for the todo store."""

    @abstractmethod
    def read(self) -> StoreData:
        """Return the full store. An absent store reads as empty."""

    @abstractmethod
    def write(self, data: StoreData) -> None:
        """Replace the full store with ``data``."""


class InMemoryStorage(StorageBackend):
    """
    Process-local storage suitable for testing.
    Reads and writes deep-copy so no caller holds a live reference.
    """

    def __init__(self, initial: Optional[StoreData] = None) -> None:
        self._lock = RLock()
        self._data = normalize_store(copy.deepcopy(initial)) if initial else empty_store()

    def read(self) -> StoreData:
        with self._lock:
            return copy.deepcopy(self._data)

    def write(self, data: StoreData) -> None:
        with self._lock:
            self._data = copy.deepcopy(data)


class JsonFileStorage(StorageBackend):
    """
    A single JSON file rewritten wholesale on every write.

    Writes go to ``<path>.tmp`` first and are then renamed over ``path``, so
    the file always holds either the old or the new complete document.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._tmp_path = f"{path}.tmp"

    @property
    def path(self) -> str:
        return self._path

    def _ensure_file(self) -> None:
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        if not os.path.exists(self._path):
            self._atomic_write(empty_store())

    def _atomic_write(self, data: StoreData) -> None:
        with open(self._tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(self._tmp_path, self._path)

    def read(self) -> StoreData:
        try:
            self._ensure_file()
            with open(self._path, "r", encoding="utf-8") as f:
                return normalize_store(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise StorageFailure() from exc

    def write(self, data: StoreData) -> None:
        try:
            os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
            self._atomic_write(data)
        except OSError as exc:
            raise StorageFailure() from exc


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_storage() -> StorageBackend:
    """
    Return the configured storage backend (one per process).
    - file: JsonFileStorage at <DATA_DIR>/todos.json
    - sqlite: SQLiteStorage at <DATA_DIR>/todos.db
    - memory: InMemoryStorage
    """
    settings = get_settings()
    if settings.store_backend == "sqlite":
        from .db import SQLiteStorage

        return SQLiteStorage(settings.sqlite_store_path)
    if settings.store_backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(settings.json_store_path)
