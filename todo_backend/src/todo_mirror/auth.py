from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from . import session
from .errors import Unauthorized
from .settings import get_settings
from .storage import StorageBackend, get_storage
from .store import TodoCache
from .upstream import UpstreamClient


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_upstream() -> UpstreamClient:
    """Shared upstream client configured from settings."""
    settings = get_settings()
    return UpstreamClient(settings.upstream_base_url, timeout=settings.upstream_timeout)


# PUBLIC_INTERFACE
def get_todo_cache(
    storage: StorageBackend = Depends(get_storage),
    upstream: UpstreamClient = Depends(get_upstream),
) -> TodoCache:
    return TodoCache(storage, upstream)


# PUBLIC_INTERFACE
def get_session_token(request: Request) -> str:
    """
    Return the session token from the request cookie.

    Raises:
        Unauthorized if the cookie is missing or empty.
    """
    token = session.extract(session.RequestHeaders(request))
    if not token:
        raise Unauthorized()
    return token


# PUBLIC_INTERFACE
def get_current_user_id(
    token: str = Depends(get_session_token),
    cache: TodoCache = Depends(get_todo_cache),
) -> int:
    """
    Authenticate the caller and make sure their bucket is hydrated.

    Usage:
        router = APIRouter(dependencies=[Depends(get_current_user_id)])
        def handler(user_id: int = Depends(get_current_user_id)): ...

    Raises:
        Unauthorized if there is no session cookie or upstream rejects the token.
    """
    return cache.ensure_hydrated(token)
