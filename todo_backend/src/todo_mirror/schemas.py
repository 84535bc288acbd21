from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"todo": "Buy milk", "completed": False}}
    )

    todo: str = Field(..., description="Todo text", min_length=1)
    completed: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"completed": True}}
    )

    todo: Optional[str] = Field(default=None, description="Todo text")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"id": 255, "todo": "Buy milk", "completed": False, "userId": 1}
        }
    )

    id: int = Field(..., description="Store-assigned identifier, unique across all users")
    todo: str = Field(..., description="Todo text")
    completed: bool = Field(..., description="Completion status flag")
    userId: int = Field(..., description="Owner user id")


class TodoPage(BaseModel):
    """
    One page of the caller's cached todos.
    """

    page: int = Field(..., description="1-based page number")
    limit: int = Field(..., description="Page size, between 1 and 50")
    total: int = Field(..., description="Number of todos in the caller's bucket")
    todos: List[TodoOut] = Field(..., description="Todos on this page")


class LoginRequest(BaseModel):
    """
    Credentials forwarded to the upstream login. Both are required; a missing
    one is answered with 400 before upstream is contacted.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "emilys", "password": "emilyspass"}}
    )

    username: Optional[str] = None
    password: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True
