"""Strategy base class, capability lookup and registry.

A strategy is any object exposing some of the lifecycle hooks in
``HOOKS``. Hooks are optional: the session manager checks for each one
with :func:`get_hook` before dispatching and falls back to its own
default behavior when a hook is missing.
"""

from __future__ import annotations

import inspect

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Literal


if TYPE_CHECKING:
    from .session import SessionManager


StrategyHook = Literal["mounted", "login", "fetch_user", "logout", "reset"]

HOOKS: tuple[StrategyHook, ...] = ("mounted", "login", "fetch_user", "logout", "reset")


class Strategy:
    """Convenience base class for strategies.

    Subclasses implement any subset of ``mounted``, ``login``,
    ``fetch_user``, ``logout`` and ``reset`` as plain or ``async``
    methods. Hooks receive the positional and keyword arguments passed to
    the matching :class:`SessionManager` method.

    Parameters
    ----------
    name : str
        Unique strategy name.
    **options : Any
        Strategy-specific options (endpoints, client ids, ...).
    """

    def __init__(self, name: str, **options: Any) -> None:
        """Initialize the strategy."""
        self.name = name
        self.options = options
        self.auth: SessionManager | None = None

    def bind(self, auth: SessionManager) -> None:
        """Attach the session manager this strategy was registered with."""
        self.auth = auth

    def capabilities(self) -> frozenset[str]:
        """Return the names of the hooks this strategy implements."""
        return frozenset(hook for hook in HOOKS if get_hook(self, hook) is not None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def get_hook(strategy: Any, hook: str) -> Callable[..., Any] | None:
    """Return the callable implementing ``hook`` on ``strategy``, or None.

    A missing strategy, a missing attribute and an attribute set to None
    all mean the hook is not supported.
    """
    if strategy is None:
        return None
    fn = getattr(strategy, hook, None)
    return fn if callable(fn) else None


async def call_hook(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a hook and await its result when it is awaitable."""
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class StrategyRegistry:
    """Mapping from strategy name to strategy object."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._strategies: dict[str, Any] = {}

    def register(self, name: str, strategy: Any) -> None:
        """Store ``strategy`` under ``name``, replacing any previous entry."""
        self._strategies[name] = strategy

    def get(self, name: str | None) -> Any:
        """Return the strategy registered under ``name``, or None."""
        if name is None:
            return None
        return self._strategies.get(name)

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._strategies)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strategies)
