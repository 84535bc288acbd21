import httpx
import pytest

from todo_mirror.errors import Unauthorized, UpstreamFailure
from todo_mirror.upstream import TODO_PAGE_SIZE, LoginResult, UpstreamClient


def make_client(handler):
    return UpstreamClient("https://upstream.test", transport=httpx.MockTransport(handler))


def paged_todos(items, seen):
    def handler(request):
        seen.append(request)
        limit = int(request.url.params["limit"])
        skip = int(request.url.params["skip"])
        return httpx.Response(200, json={"todos": items[skip:skip + limit], "total": len(items)})

    return handler


class TestFetchAllTodos:
    def test_pages_until_total(self):
        items = [{"id": i, "todo": f"t{i}", "completed": False, "userId": 4} for i in range(1, 251)]
        seen = []
        todos = make_client(paged_todos(items, seen)).fetch_all_todos(4, "tok")
        assert len(todos) == 250
        assert [r.url.params["skip"] for r in seen] == ["0", "100", "200"]
        assert all(r.url.params["limit"] == str(TODO_PAGE_SIZE) for r in seen)
        assert all(r.headers["authorization"] == "Bearer tok" for r in seen)
        assert seen[0].url.path == "/todos/user/4"

    def test_stops_on_empty_page(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.params["skip"] == "0":
                return httpx.Response(200, json={"todos": [{"id": 1, "todo": "a", "completed": True, "userId": 4}], "total": 500})
            return httpx.Response(200, json={"todos": [], "total": 500})

        todos = make_client(handler).fetch_all_todos(4, "tok")
        assert todos == [{"id": 1, "todo": "a", "completed": True, "userId": 4}]
        assert len(seen) == 2

    def test_missing_user_id_defaults_to_owner(self):
        def handler(request):
            return httpx.Response(200, json={"todos": [{"id": 7, "todo": "x", "completed": False}], "total": 1})

        assert make_client(handler).fetch_all_todos(3, "tok")[0]["userId"] == 3

    def test_non_2xx_page_raises(self):
        def handler(request):
            return httpx.Response(500, json={"message": "boom"})

        with pytest.raises(UpstreamFailure):
            make_client(handler).fetch_all_todos(1, "tok")

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamFailure):
            make_client(handler).fetch_all_todos(1, "tok")


class TestMe:
    def test_returns_user(self):
        def handler(request):
            assert request.headers["authorization"] == "Bearer tok"
            return httpx.Response(200, json={"id": 15, "username": "kminchelle"})

        assert make_client(handler).me("tok")["id"] == 15

    def test_rejected_token_is_unauthorized(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Token Expired!"})

        with pytest.raises(Unauthorized):
            make_client(handler).me("tok")

    def test_unreachable_is_upstream_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamFailure):
            make_client(handler).me("tok")


class TestLogin:
    def test_sends_credentials_and_expiry(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 1, "accessToken": "acc"})

        result = make_client(handler).login("emilys", "pw", 30)
        assert result.ok
        assert result.token == "acc"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/auth/login"
        assert b'"expiresInMins":30' in seen[0].content.replace(b" ", b"")

    def test_error_status_is_returned_not_raised(self):
        def handler(request):
            return httpx.Response(400, json={"message": "Invalid credentials"})

        result = make_client(handler).login("emilys", "bad")
        assert not result.ok
        assert result.status_code == 400
        assert result.body == {"message": "Invalid credentials"}

    @pytest.mark.parametrize(
        "body,token",
        [
            ({"accessToken": "a", "token": "b"}, "a"),
            ({"token": "b"}, "b"),
            ({"accessToken": 5, "token": "b"}, "b"),
            ({"id": 1}, None),
            (None, None),
        ],
    )
    def test_token_selection(self, body, token):
        assert LoginResult(status_code=200, body=body).token == token
