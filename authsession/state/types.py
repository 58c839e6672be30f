"""Type definitions for authsession state management.

Shared types used across storage and navigation implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


#: Keys of the session state owned by the session manager.
STATE_USER = "user"
STATE_LOGGED_IN = "loggedIn"
STATE_STRATEGY = "strategy"
STATE_BUSY = "busy"

#: Universal key holding the page to return to after login.
REDIRECT_KEY = "redirect"


def initial_state() -> dict[str, Any]:
    """Return the session state every storage starts from."""
    return {STATE_USER: None, STATE_LOGGED_IN: False, STATE_BUSY: False}


@dataclass
class Route:
    """The route currently displayed by the navigation context.

    Attributes
    ----------
    path : str
        Path without query string or fragment (e.g. ``/secret``).
    full_path : str
        Path including query string and fragment (e.g. ``/secret?tab=2``).
        Defaults to ``path``.
    options : dict[str, Any]
        Per-route options such as ``{"auth": False}`` to opt out of
        login enforcement.
    """

    path: str = "/"
    full_path: str = ""
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.full_path:
            self.full_path = self.path


@dataclass
class SessionSnapshot:
    """Read-only copy of the session state.

    Attributes
    ----------
    user : Any
        The user record, or None when logged out.
    logged_in : bool
        Always equal to ``user is not None``.
    strategy : str or None
        Name of the active strategy.
    busy : bool
        True while a login call is in flight.
    """

    user: Any = None
    logged_in: bool = False
    strategy: str | None = None
    busy: bool = False
