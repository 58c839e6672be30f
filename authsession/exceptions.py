"""authsession exception hierarchy.

All authsession-specific exceptions inherit from AuthSessionException,
enabling catch-all handling while supporting specific error types.
"""

from __future__ import annotations

from typing import Any


class AuthSessionException(Exception):
    """Base exception for all authsession errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize authsession exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (method, strategy, url, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class AuthenticationError(AuthSessionException):
    """Base exception for failures raised while orchestrating a strategy.

    Parameters
    ----------
    message : str
        Human-readable error message.
    strategy : str, optional
        Name of the strategy that was active.
    method : str, optional
        The lifecycle method that failed (``"login"``, ``"mounted"``, ...).
    """

    def __init__(
        self,
        message: str,
        strategy: str | None = None,
        method: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize authentication error."""
        super().__init__(message, strategy=strategy, method=method, **context)
        self.strategy = strategy
        self.method = method


class StrategyLifecycleError(AuthenticationError):
    """A strategy's ``mounted``, ``fetch_user``, ``logout`` or ``reset`` hook failed.

    Broadcast to error listeners and then swallowed so the session
    degrades to a logged-out state instead of crashing the caller.
    """


class LoginError(AuthenticationError):
    """A strategy's ``login`` hook failed.

    Broadcast to error listeners and re-raised to the caller.
    """


class NoTokenError(AuthenticationError):
    """No token is stored for the strategy an authenticated request needs.

    Raised before any transport call is attempted.
    """


class RequestError(AuthSessionException):
    """The request transport failed.

    Parameters
    ----------
    message : str
        Human-readable error message.
    status_code : int, optional
        HTTP status code when the server answered.
    url : str, optional
        The requested URL.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize request error."""
        super().__init__(message, status_code=status_code, url=url, **context)
        self.status_code = status_code
        self.url = url
