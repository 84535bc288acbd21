"""
Session codec: the upstream bearer token carried in an HTTP-only cookie.

The token is opaque to this service. It is read from the raw ``Cookie``
header through a small ``HeaderSource`` abstraction so the same parsing works
for FastAPI requests and for plain header mappings.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional, Protocol
from urllib.parse import unquote

from fastapi import Request, Response

AUTH_COOKIE_NAME = "dj_token"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class HeaderSource(Protocol):
    """Anything that can answer a case-insensitive header lookup."""

    def header_value(self, name: str) -> Optional[str]:
        ...


class RequestHeaders:
    """HeaderSource over a Starlette/FastAPI request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    def header_value(self, name: str) -> Optional[str]:
        return self._request.headers.get(name)


class MappingHeaders:
    """HeaderSource over a plain mapping of header names to values."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self._headers = {k.lower(): v for k, v in headers.items()}

    def header_value(self, name: str) -> Optional[str]:
        return self._headers.get(name.lower())


@dataclass(frozen=True)
class CookieDirective:
    """
    A cookie to set on an outgoing response.

    ``expires`` is None for session cookies; the epoch forces deletion.
    """

    name: str
    value: str
    http_only: bool = True
    secure: bool = True
    same_site: str = "lax"
    path: str = "/"
    expires: Optional[datetime] = None

    def apply(self, response: Response) -> None:
        response.set_cookie(
            key=self.name,
            value=self.value,
            httponly=self.http_only,
            secure=self.secure,
            samesite=self.same_site,
            path=self.path,
            expires=self.expires,
        )


# PUBLIC_INTERFACE
def issue(token: str, secure: bool = True) -> CookieDirective:
    """Session cookie carrying ``token``: HTTP-only, same-site lax, path '/', no expiry."""
    return CookieDirective(name=AUTH_COOKIE_NAME, value=token, secure=secure)


# PUBLIC_INTERFACE
def revoke(secure: bool = True) -> CookieDirective:
    """Empty session cookie expiring at the epoch, so browsers drop it at once."""
    return CookieDirective(name=AUTH_COOKIE_NAME, value="", secure=secure, expires=_EPOCH)


# PUBLIC_INTERFACE
def extract(source: HeaderSource) -> Optional[str]:
    """
    Return the session token from the ``Cookie`` header, or None.

    Pairs are split on ';' and then on the first '='. Empty fragments and
    fragments without '=' are skipped. The value is URL-decoded.
    """
    header = source.header_value("cookie")
    if not header:
        return None
    for part in header.split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            continue
        if key == AUTH_COOKIE_NAME:
            return unquote(value)
    return None
