"""
Thin client for the upstream identity/todo API (DummyJSON contract).

Endpoints used:
- POST /auth/login {username, password, expiresInMins}
- GET  /auth/me                      (Authorization: Bearer <token>)
- GET  /todos/user/{id}?limit=&skip= (Authorization: Bearer <token>)

No retries. No timeout unless one is configured.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog

from .errors import Unauthorized, UpstreamFailure
from .models import TodoEntity

log = structlog.get_logger()

TODO_PAGE_SIZE = 100


@dataclass(frozen=True)
class LoginResult:
    """Status and decoded body of an upstream login call."""

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def token(self) -> Optional[str]:
        if not isinstance(self.body, dict):
            return None
        for key in ("accessToken", "token"):
            value = self.body.get(key)
            if isinstance(value, str):
                return value
        return None


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _to_todo(raw: Dict[str, Any], user_id: int) -> TodoEntity:
    return {
        "id": int(raw["id"]),
        "todo": str(raw.get("todo", "")),
        "completed": bool(raw.get("completed", False)),
        "userId": int(raw.get("userId", user_id)),
    }


# PUBLIC_INTERFACE
class UpstreamClient:
    """Synchronous httpx client bound to the upstream base URL."""

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _bearer(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def login(self, username: str, password: str, expires_in_mins: int = 30) -> LoginResult:
        """
        Exchange credentials for a token.

        Non-2xx answers are returned, not raised, so the caller can pass the
        upstream status and body through. Transport errors raise UpstreamFailure.
        """
        try:
            response = self._client.post(
                "/auth/login",
                json={"username": username, "password": password, "expiresInMins": expires_in_mins},
            )
        except httpx.HTTPError as exc:
            log.warning("upstream_unreachable", call="login", error=str(exc))
            raise UpstreamFailure() from exc
        return LoginResult(status_code=response.status_code, body=_decode_json(response))

    def me(self, token: str) -> Dict[str, Any]:
        """Return the user the token belongs to. Raises Unauthorized if upstream rejects it."""
        try:
            response = self._client.get("/auth/me", headers=self._bearer(token))
        except httpx.HTTPError as exc:
            log.warning("upstream_unreachable", call="me", error=str(exc))
            raise UpstreamFailure() from exc
        if not response.is_success:
            log.info("upstream_token_rejected", status=response.status_code)
            raise Unauthorized()
        data = _decode_json(response)
        if not isinstance(data, dict) or "id" not in data:
            raise Unauthorized()
        return data

    def fetch_all_todos(self, user_id: int, token: str) -> List[TodoEntity]:
        """
        Fetch every todo of ``user_id``, TODO_PAGE_SIZE at a time.

        Stops once the collected count reaches the reported total or a page
        comes back empty. Any failed page raises UpstreamFailure.
        """
        collected: List[TodoEntity] = []
        skip = 0
        while True:
            try:
                response = self._client.get(
                    f"/todos/user/{user_id}",
                    params={"limit": TODO_PAGE_SIZE, "skip": skip},
                    headers=self._bearer(token),
                )
            except httpx.HTTPError as exc:
                log.warning("upstream_unreachable", call="todos", user_id=user_id, error=str(exc))
                raise UpstreamFailure() from exc
            if not response.is_success:
                log.warning("upstream_todos_failed", user_id=user_id, status=response.status_code)
                raise UpstreamFailure()

            data = _decode_json(response) or {}
            page = data.get("todos") or []
            collected.extend(_to_todo(raw, user_id) for raw in page)
            skip += TODO_PAGE_SIZE

            total = data.get("total")
            if not isinstance(total, int):
                total = len(collected)
            if len(collected) >= total or not page:
                return collected
