"""Error listener registry for authsession."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .log import debug


# Listener signature: listener(error, context) where context carries "method"
ErrorListener = Callable[[BaseException, dict[str, Any]], None]


class ErrorBus:
    """Ordered fan-out of errors to registered listeners.

    Listeners are called in registration order. Exceptions raised by a
    listener are not caught: they propagate to whoever broadcast the error
    and stop the remaining listeners from running.
    """

    def __init__(self) -> None:
        """Initialize the bus with no listeners."""
        self._listeners: list[ErrorListener] = []
        self.last_error: BaseException | None = None

    def __len__(self) -> int:
        return len(self._listeners)

    def on_error(self, listener: ErrorListener) -> ErrorListener:
        """Register a listener.

        The same listener may be registered more than once and will then
        be called once per registration. Returns the listener so this can
        be used as a decorator.

        Parameters
        ----------
        listener : ErrorListener
            Callable receiving ``(error, context)``.

        Returns
        -------
        ErrorListener
            The registered listener.
        """
        self._listeners.append(listener)
        return listener

    def off_error(self, listener: ErrorListener) -> bool:
        """Remove the first registration of ``listener``.

        Returns
        -------
        bool
            True if a registration was removed.
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def call_on_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        """Record ``error`` as the last error and notify every listener.

        Parameters
        ----------
        error : BaseException
            The error to broadcast.
        context : dict, optional
            Origin details, at least ``{"method": ...}``.
        """
        payload = context if context is not None else {}
        self.last_error = error
        debug(f"Broadcasting {type(error).__name__} from {payload.get('method')!r}")
        for listener in list(self._listeners):
            listener(error, payload)

    def clear(self) -> None:
        """Remove all listeners and forget the last error."""
        self._listeners.clear()
        self.last_error = None
