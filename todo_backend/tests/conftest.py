import json
import os
from typing import Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

# Default to memory storage so importing the app never touches the filesystem
os.environ.setdefault("STORE_BACKEND", "memory")

from todo_mirror.auth import get_upstream  # noqa: E402
from todo_mirror.main import app  # noqa: E402
from todo_mirror.storage import InMemoryStorage, get_storage  # noqa: E402
from todo_mirror.upstream import UpstreamClient  # noqa: E402

UPSTREAM_URL = "https://upstream.test"


class FakeUpstream:
    """
    In-process stand-in for the DummyJSON auth/todos API, served through
    httpx.MockTransport.
    """

    def __init__(self) -> None:
        self.accounts: Dict[str, Dict] = {
            "emilys": {"password": "emilyspass", "id": 1, "firstName": "Emily"},
            "michaelw": {"password": "michaelwpass", "id": 2, "firstName": "Michael"},
            "tokenless": {"password": "pw", "id": 9, "firstName": "No", "omit_token": True},
        }
        self.tokens: Dict[str, int] = {}
        self.todos: Dict[int, List[Dict]] = {
            1: [{"id": i, "todo": f"Upstream task {i}", "completed": i % 3 == 0, "userId": 1} for i in range(1, 26)],
            2: [{"id": 100 + i, "todo": f"Other task {i}", "completed": False, "userId": 2} for i in range(1, 4)],
        }
        self.todo_requests: List[httpx.Request] = []
        self.login_bodies: List[Dict] = []

    def token_for(self, username: str) -> str:
        account = self.accounts[username]
        token = f"token-{username}"
        self.tokens[token] = account["id"]
        return token

    def _user_for(self, request: httpx.Request) -> Optional[int]:
        auth = request.headers.get("authorization", "")
        if not auth.startswith("Bearer "):
            return None
        return self.tokens.get(auth[len("Bearer "):])

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST" and path == "/auth/login":
            body = json.loads(request.content or b"{}")
            self.login_bodies.append(body)
            account = self.accounts.get(body.get("username"))
            if account is None or account["password"] != body.get("password"):
                return httpx.Response(400, json={"message": "Invalid credentials"})
            if account.get("omit_token"):
                return httpx.Response(200, json={"id": account["id"]})
            return httpx.Response(
                200,
                json={"id": account["id"], "accessToken": self.token_for(body["username"]), "refreshToken": "r"},
            )

        user_id = self._user_for(request)
        if user_id is None:
            return httpx.Response(401, json={"message": "Invalid/Expired Token!"})

        if request.method == "GET" and path == "/auth/me":
            return httpx.Response(200, json={"id": user_id, "username": f"user{user_id}"})

        if request.method == "GET" and path.startswith("/todos/user/"):
            self.todo_requests.append(request)
            owner = int(path.rsplit("/", 1)[1])
            limit = int(request.url.params.get("limit", "30"))
            skip = int(request.url.params.get("skip", "0"))
            items = self.todos.get(owner, [])
            return httpx.Response(
                200,
                json={"todos": items[skip:skip + limit], "total": len(items), "skip": skip, "limit": limit},
            )

        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def upstream_client(fake_upstream):
    client = UpstreamClient(UPSTREAM_URL, transport=httpx.MockTransport(fake_upstream.handle))
    yield client
    client.close()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def client(upstream_client, storage):
    app.dependency_overrides[get_upstream] = lambda: upstream_client
    app.dependency_overrides[get_storage] = lambda: storage
    # https so the Secure session cookie is sent back by the client
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(client):
    res = client.post("/api/auth/login", json={"username": "emilys", "password": "emilyspass"})
    assert res.status_code == 200
    return client
