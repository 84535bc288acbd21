from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from .. import session
from ..auth import get_session_token, get_upstream
from ..errors import InvalidInput
from ..schemas import LoginRequest, OkResponse
from ..settings import get_settings
from ..upstream import UpstreamClient

log = structlog.get_logger()

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=OkResponse,
    summary="Log In",
    description=(
        "Exchange username/password for an upstream token and store it in an "
        "HTTP-only session cookie. Upstream errors are passed through with their status."
    ),
    responses={
        200: {"description": "Logged in; session cookie set"},
        400: {"description": "Missing credentials"},
        500: {"description": "Upstream answered without a token"},
    },
)
def login(
    payload: Optional[LoginRequest] = None,
    upstream: UpstreamClient = Depends(get_upstream),
) -> JSONResponse:
    if payload is None or not payload.username or not payload.password:
        raise InvalidInput("Missing credentials")

    settings = get_settings()
    result = upstream.login(payload.username, payload.password, settings.login_expires_in_mins)
    if not result.ok:
        log.info("login_failed", username=payload.username, status=result.status_code)
        body = result.body if result.body is not None else {"message": "Login failed"}
        return JSONResponse(content=body, status_code=result.status_code or 500)

    token = result.token
    if token is None:
        log.warning("login_token_missing", username=payload.username)
        return JSONResponse(
            content={"message": "Login failed: token missing"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = JSONResponse(content={"ok": True}, status_code=status.HTTP_200_OK)
    session.issue(token, secure=settings.cookie_secure).apply(response)
    log.info("login_succeeded", username=payload.username)
    return response


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=OkResponse,
    summary="Log Out",
    description="Clear the session cookie.",
)
def logout() -> JSONResponse:
    response = JSONResponse(content={"ok": True}, status_code=status.HTTP_200_OK)
    session.revoke(secure=get_settings().cookie_secure).apply(response)
    return response


# PUBLIC_INTERFACE
@router.get(
    "/me",
    summary="Current User",
    description="Return the upstream profile of the logged-in user.",
    responses={
        200: {"description": "Upstream user info"},
        401: {"description": "Missing or rejected session"},
    },
)
def me(
    token: str = Depends(get_session_token),
    upstream: UpstreamClient = Depends(get_upstream),
) -> Dict[str, Any]:
    return upstream.me(token)
