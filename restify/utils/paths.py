"""
Path helpers for the API namespace.

`path()` builds URLs under the configured base (RESTIFY_BASE, falling back to
`/restify-api`); `is_restify()` recognizes requests that target the API.
"""
from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable, Mapping, Optional
from urllib.parse import urlencode

from restify.config import DEFAULT_BASE, get_settings

FALLBACK_PREFIX = DEFAULT_BASE.strip("/")


def path(suffix: Optional[str] = None, query: Optional[Mapping] = None) -> str:
    """Return the API base path, optionally extended with a suffix and query string."""
    url = get_settings().base or DEFAULT_BASE
    if suffix is not None:
        url = f"{url}/{suffix}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def _request_path(request) -> str:
    raw = getattr(getattr(request, "url", None), "path", None)
    if raw is None:
        raw = str(request)
    trimmed = raw.strip("/")
    return trimmed or "/"


def _matches(candidate: str, pattern: str) -> bool:
    return fnmatchcase(candidate, pattern)


def is_restify(request, repositories: Iterable = ()) -> bool:
    """Return True when the request path falls under the API namespace.

    Accepts a Starlette request or a plain path string. Repositories declaring a
    custom prefix extend the namespace with `<prefix>/*`.
    """
    candidate = _request_path(request)
    base = path().strip("/") or "/"

    if _matches(candidate, base):
        return True
    if _matches(candidate, f"{base}/*".strip("/")):
        return True
    if _matches(candidate, f"{FALLBACK_PREFIX}/*"):
        return True
    for repository in repositories:
        prefix = repository.prefix()
        if prefix and _matches(candidate, f"{prefix.strip('/')}/*"):
            return True
    return False
