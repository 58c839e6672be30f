"""Small helpers shared by the auth components."""

from __future__ import annotations

import re

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .state.types import Route


# Same-origin path: one leading slash followed by a path character, so
# protocol-relative URLs ("//evil.example") and absolute URLs never match.
_RELATIVE_URL_RE = re.compile(r"^/[a-zA-Z0-9@\-%_~][/a-zA-Z0-9@\-%_~]*[?]?([^#]*)#?([^#]*)$")

_MISSING = object()


def is_unset(value: Any) -> bool:
    """Return True for None and the empty string."""
    return value is None or value == ""


def is_set(value: Any) -> bool:
    """Return True unless ``is_unset(value)``."""
    return not is_unset(value)


def is_relative_url(url: Any) -> bool:
    """Check whether ``url`` is a same-origin relative path.

    Parameters
    ----------
    url : Any
        Candidate URL. Non-strings are never relative URLs.

    Returns
    -------
    bool
        True for paths like ``/secret`` or ``/a/b?x=1#top``.

    Examples
    --------
    >>> is_relative_url("/secret")
    True
    >>> is_relative_url("//evil.example/secret")
    False
    >>> is_relative_url("https://example.com/")
    False
    """
    return isinstance(url, str) and bool(_RELATIVE_URL_RE.match(url))


def normalize_url(url: str) -> str:
    """Drop the query string, fragment and trailing slash of a path."""
    path = url.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def is_same_url(a: str | None, b: str | None) -> bool:
    """Check whether two URLs point at the same page.

    Query strings, fragments and trailing slashes are ignored.
    """
    if a is None or b is None:
        return False
    return normalize_url(a) == normalize_url(b)


def get_prop(obj: Any, path: str) -> Any:
    """Read a dotted path off nested mappings, sequences or objects.

    Parameters
    ----------
    obj : Any
        The root object.
    path : str
        Dotted path such as ``"data.user"`` or ``"roles.0"``.

    Returns
    -------
    Any
        The value at ``path``, or None when any segment is missing.
    """
    current = obj
    for part in path.split("."):
        if not part:
            continue
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            current = getattr(current, part, None)
    return current


def route_option(route: Route, key: str, value: Any) -> bool:
    """Check whether the route explicitly sets option ``key`` to ``value``.

    An absent option never matches, even when ``value`` is falsy.
    """
    return route.options.get(key, _MISSING) == value
