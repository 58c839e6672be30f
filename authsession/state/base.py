"""Abstract base classes for the session manager's collaborators.

These interfaces define the contract for storage and navigation
backends, so the session manager stays agnostic to cookies, local
storage, state containers and routers.
"""

# pylint: disable=unnecessary-ellipsis
# Ellipsis (...) is the standard Python idiom for abstract method bodies

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable

    from .types import Route


class Storage(ABC):
    """Abstract session storage interface.

    Two key spaces are exposed:

    * **state**: ephemeral, in-memory session fields (``user``,
      ``loggedIn``, ``busy``).
    * **universal**: persisted fields synchronized across surfaces
      (cookies, local storage, ...). Used for the strategy name, tokens
      and the return-to path. Every universal write is mirrored into
      state under the same key.
    """

    @abstractmethod
    def get_state(self, key: str) -> Any:
        """Get an ephemeral state field.

        Parameters
        ----------
        key : str
            The state key.

        Returns
        -------
        Any
            The value, or None if unset.
        """
        ...

    @abstractmethod
    def set_state(self, key: str, value: Any) -> Any:
        """Set an ephemeral state field and notify watchers on change.

        Parameters
        ----------
        key : str
            The state key.
        value : Any
            The new value.

        Returns
        -------
        Any
            The stored value.
        """
        ...

    @abstractmethod
    def set_states(self, values: dict[str, Any]) -> None:
        """Set several state fields before notifying any watcher.

        Watchers of every changed field run after all fields are stored,
        so they observe the complete update.

        Parameters
        ----------
        values : dict[str, Any]
            State keys and their new values.
        """
        ...

    @abstractmethod
    def get_universal(self, key: str) -> Any:
        """Get a persisted field.

        Parameters
        ----------
        key : str
            The universal key.

        Returns
        -------
        Any
            The value, or None if unset.
        """
        ...

    @abstractmethod
    def set_universal(self, key: str, value: Any) -> Any:
        """Persist a field everywhere and mirror it into state.

        Setting ``None`` removes the persisted value.

        Parameters
        ----------
        key : str
            The universal key.
        value : Any
            The new value.

        Returns
        -------
        Any
            The stored value.
        """
        ...

    @abstractmethod
    def sync_universal(self, key: str, default: Any = None) -> Any:
        """Re-read a persisted field, fall back to ``default``, and write it back.

        Parameters
        ----------
        key : str
            The universal key.
        default : Any, optional
            Value used when nothing is persisted.

        Returns
        -------
        Any
            The synchronized value.
        """
        ...

    @abstractmethod
    def watch_state(self, key: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to changes of a state field.

        Callbacks run synchronously inside the ``set_state`` call that
        changed the value.

        Parameters
        ----------
        key : str
            The state key to watch.
        callback : Callable[[Any], None]
            Called with the new value.

        Returns
        -------
        Callable[[], None]
            Function that removes the subscription.
        """
        ...


class Navigator(ABC):
    """Abstract routing/navigation context."""

    @property
    @abstractmethod
    def route(self) -> Route:
        """The route currently displayed."""
        ...

    @abstractmethod
    def redirect(self, url: str) -> None:
        """Navigate through the router (or issue a server-side redirect).

        Parameters
        ----------
        url : str
            Destination path or URL.
        """
        ...

    @abstractmethod
    def replace(self, url: str) -> None:
        """Replace the current page with a full page load (client side only).

        Parameters
        ----------
        url : str
            Destination path or URL.
        """
        ...
