from __future__ import annotations

from typing import Dict, List, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A todo as persisted in the store and returned by the API.

    Fields:
    - id: Positive integer, unique across the whole store, assigned by the store
    - todo: The todo text
    - completed: Boolean completion flag
    - userId: Id of the owning user (the bucket key)
    """

    id: int
    todo: str
    completed: bool
    userId: int


class UserBucket(TypedDict):
    """The per-user collection of todos, most recent first."""

    todos: List[TodoEntity]


class StoreData(TypedDict):
    """
    The whole persisted document.

    ``users`` is keyed by the user id in its decimal string form so the
    document round-trips through JSON unchanged.
    """

    nextId: int
    users: Dict[str, UserBucket]


def empty_store() -> StoreData:
    return {"nextId": 1, "users": {}}


def bucket_key(user_id: int) -> str:
    return str(int(user_id))
