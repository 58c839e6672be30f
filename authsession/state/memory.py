"""In-memory storage and navigation implementations.

Default backends for pre-render contexts, single-process use and tests.
Not thread-safe: the session manager runs on a single event loop.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from .base import Navigator, Storage
from .types import Route, initial_state


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger("authsession.state")


class MemoryStorage(Storage):
    """In-memory storage with a state dict and a persisted dict.

    The persisted dict stands in for cookies and local storage; pass a
    shared dict as ``persisted`` to simulate values surviving a reload.

    Parameters
    ----------
    persisted : dict[str, Any], optional
        Backing dict for universal values.
    state : dict[str, Any], optional
        Initial state, merged over the default session state.
    """

    def __init__(
        self,
        persisted: dict[str, Any] | None = None,
        state: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the memory storage."""
        self._persisted: dict[str, Any] = persisted if persisted is not None else {}
        self._state: dict[str, Any] = initial_state()
        if state:
            self._state.update(state)
        self._watchers: dict[str, list[Callable[[Any], None]]] = {}

    @property
    def persisted(self) -> dict[str, Any]:
        """The backing dict of universal values."""
        return self._persisted

    def get_state(self, key: str) -> Any:
        """Get an ephemeral state field."""
        return self._state.get(key)

    def set_state(self, key: str, value: Any) -> Any:
        """Set a state field, notifying watchers when the value changed."""
        self.set_states({key: value})
        return value

    def set_states(self, values: dict[str, Any]) -> None:
        """Store all fields, then notify watchers of those that changed."""
        changed = [key for key, value in values.items() if self._state.get(key) != value]
        self._state.update(values)
        for key in changed:
            # Copy so callbacks may unsubscribe while being notified
            for callback in list(self._watchers.get(key, ())):
                callback(values[key])

    def get_universal(self, key: str) -> Any:
        """Get a persisted field."""
        return self._persisted.get(key)

    def set_universal(self, key: str, value: Any) -> Any:
        """Persist a field and mirror it into state."""
        if value is None:
            self._persisted.pop(key, None)
        else:
            self._persisted[key] = value
        return self.set_state(key, value)

    def sync_universal(self, key: str, default: Any = None) -> Any:
        """Re-read a persisted field, falling back to ``default``."""
        value = self._persisted.get(key)
        if value is None:
            value = default
        if value is not None:
            self.set_universal(key, value)
        else:
            self.set_state(key, None)
        return value

    def watch_state(self, key: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to changes of a state field."""
        self._watchers.setdefault(key, []).append(callback)

        def unwatch() -> None:
            callbacks = self._watchers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unwatch


class MemoryNavigator(Navigator):
    """Navigator that records navigations instead of performing them.

    Useful for pre-render contexts and tests. Each navigation updates the
    current route so subsequent redirects see the new location.

    Parameters
    ----------
    route : Route, optional
        The initial route (default ``/``).
    """

    def __init__(self, route: Route | None = None) -> None:
        """Initialize the memory navigator."""
        self._route = route or Route()
        self.history: list[tuple[str, str]] = []

    @property
    def route(self) -> Route:
        """The route currently displayed."""
        return self._route

    @route.setter
    def route(self, value: Route) -> None:
        self._route = value

    def redirect(self, url: str) -> None:
        """Record a router navigation."""
        self._navigate("redirect", url)

    def replace(self, url: str) -> None:
        """Record a full page replace."""
        self._navigate("replace", url)

    def _navigate(self, kind: str, url: str) -> None:
        logger.debug("Navigator %s -> %s", kind, url)
        self.history.append((kind, url))
        path, _, _ = url.partition("?")
        self._route = Route(path=path.partition("#")[0] or "/", full_path=url)
