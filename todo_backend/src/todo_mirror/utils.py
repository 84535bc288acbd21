from __future__ import annotations

import math
from typing import Any, Dict, Sequence

from .errors import InvalidInput, NotFound

MAX_PAGE_LIMIT = 50
DEFAULT_PAGE_LIMIT = 10


# PUBLIC_INTERFACE
def clamp_page(page: int) -> int:
    return max(1, page)


# PUBLIC_INTERFACE
def clamp_limit(limit: int) -> int:
    return max(1, min(MAX_PAGE_LIMIT, limit))


# PUBLIC_INTERFACE
def page_envelope(items: Sequence[Any], page: int, limit: int) -> Dict[str, Any]:
    """
    Slice ``items`` for a page-based list endpoint.

    Args:
        items: The full, already ordered collection.
        page: Requested page; clamped to at least 1.
        limit: Requested page size; clamped to [1, 50].

    Returns:
        Dict with keys: page, limit, total, todos.
    """
    page = clamp_page(page)
    limit = clamp_limit(limit)
    skip = (page - 1) * limit
    return {
        "page": page,
        "limit": limit,
        "total": len(items),
        "todos": list(items[skip:skip + limit]),
    }


# PUBLIC_INTERFACE
def parse_todo_id(raw: str) -> int:
    """
    Parse a todo id from a path segment.

    Raises InvalidInput when the segment is not a finite number, and NotFound
    when it is finite but not integral (no todo can carry such an id).
    """
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise InvalidInput("Invalid id") from exc
    if not math.isfinite(value):
        raise InvalidInput("Invalid id")
    if not value.is_integer():
        raise NotFound("Not found")
    return int(value)
