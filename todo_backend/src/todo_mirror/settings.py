from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - APP_ENV: 'development' (default) or 'production'
    - UPSTREAM_BASE_URL: root of the identity/todo API. Default 'https://dummyjson.com'
    - UPSTREAM_TIMEOUT: optional timeout in seconds for upstream calls (unset: no timeout)
    - LOGIN_EXPIRES_IN_MINS: token lifetime requested on upstream login (default 30)
    - STORE_BACKEND: 'file' (default), 'sqlite' or 'memory'
    - DATA_DIR: directory for todos.json / todos.db. Defaults to '<tmp>/.data' in
      production and './.data' otherwise
    - COOKIE_SECURE: 'false' to drop the Secure flag on the session cookie (default: true)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: structlog filtering level (default INFO)
    """

    app_env: str
    upstream_base_url: str
    upstream_timeout: Optional[float]
    login_expires_in_mins: int
    store_backend: str
    data_dir: str
    cookie_secure: bool
    cors_allow_origins: List[str]
    log_level: str

    @property
    def json_store_path(self) -> str:
        return os.path.join(self.data_dir, "todos.json")

    @property
    def sqlite_store_path(self) -> str:
        return os.path.join(self.data_dir, "todos.db")


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _default_data_dir(app_env: str) -> str:
    # Production filesystems are often read-only outside the temp dir.
    base = tempfile.gettempdir() if app_env == "production" else os.getcwd()
    return os.path.join(base, ".data")


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    app_env = _get_env("APP_ENV", "development").strip().lower()

    backend = _get_env("STORE_BACKEND", "file").strip().lower()
    if backend not in {"file", "sqlite", "memory"}:
        backend = "file"

    return Settings(
        app_env=app_env,
        upstream_base_url=_get_env("UPSTREAM_BASE_URL", "https://dummyjson.com").strip().rstrip("/"),
        upstream_timeout=_parse_timeout(os.getenv("UPSTREAM_TIMEOUT")),
        login_expires_in_mins=_parse_int(_get_env("LOGIN_EXPIRES_IN_MINS", "30"), 30),
        store_backend=backend,
        data_dir=_get_env("DATA_DIR", _default_data_dir(app_env)).strip(),
        cookie_secure=_parse_bool(_get_env("COOKIE_SECURE", "true"), True),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
