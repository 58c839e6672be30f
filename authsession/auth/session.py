"""Session manager orchestrating pluggable authentication strategies.

Owns the session state (``user``, ``loggedIn``, ``strategy``, ``busy``),
dispatches lifecycle calls to the active strategy, and routes failures
to the error bus. Lifecycle failures (``mounted``, ``fetch_user``,
``logout``, ``reset``) are broadcast and swallowed so the application
keeps running logged out; ``login`` and request failures are broadcast
and re-raised to the caller.
"""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from .. import log
from ..callbacks import ErrorBus
from ..config import get_settings
from ..exceptions import AuthenticationError, LoginError, StrategyLifecycleError
from ..state.memory import MemoryNavigator, MemoryStorage
from ..state.types import (
    STATE_BUSY,
    STATE_LOGGED_IN,
    STATE_STRATEGY,
    STATE_USER,
    SessionSnapshot,
)
from ..transport import HttpxTransport
from ..utils import route_option
from .redirect import RedirectPolicy
from .request import RequestFacade
from .scope import ScopeEvaluator
from .strategy import StrategyRegistry, call_hook, get_hook
from .tokens import TokenFacade


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..callbacks import ErrorListener
    from ..config import AuthSettings
    from ..state.base import Navigator, Storage
    from ..transport import Transport


logger = logging.getLogger("authsession.auth")


class SessionManager:
    """Manages the authentication session across strategies.

    Parameters
    ----------
    storage : Storage, optional
        Session storage (default: a fresh ``MemoryStorage``).
    transport : Transport, optional
        Request transport (default: ``HttpxTransport``).
    navigator : Navigator, optional
        Routing context (default: ``MemoryNavigator`` at ``/``).
    settings : AuthSettings, optional
        Configuration (default: ``get_settings()``).
    client_side : bool
        True when running in the browser. Enables the ``loggedIn``
        watcher that redirects on login/logout, and full page replaces.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        transport: Transport | None = None,
        navigator: Navigator | None = None,
        settings: AuthSettings | None = None,
        client_side: bool = False,
    ) -> None:
        """Initialize the session manager."""
        self.settings = settings or get_settings()
        self.storage = storage or MemoryStorage()
        self.transport = transport or HttpxTransport()
        self.navigator = navigator or MemoryNavigator()
        self.client_side = client_side

        log.configure(self.settings.log.level, self.settings.log.format)

        self.strategies = StrategyRegistry()
        self.errors = ErrorBus()
        self.tokens = TokenFacade(self.storage, self.settings.token.prefix)
        self.requests = RequestFacade(
            self.transport,
            self.tokens,
            self.errors,
            header_name=self.settings.token.name,
        )
        self.redirects = RedirectPolicy(
            self.navigator,
            self.storage,
            self.settings.redirect,
            client_side=client_side,
        )
        self.scopes = ScopeEvaluator(lambda: self.user, self.settings.scope_key)

        self._initialized = False
        self._unwatch: Callable[[], None] | None = None

    async def __aenter__(self) -> SessionManager:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Initialization ──────────────────────────────────────────────

    @property
    def initialized(self) -> bool:
        """True once ``initialize()`` has run."""
        return self._initialized

    async def initialize(self) -> None:
        """Restore the persisted strategy and mount it.

        On the client side, also subscribes to ``loggedIn`` changes so
        logging in redirects ``home`` and logging out redirects to
        ``logout``, except on routes with the option ``auth=False``.
        Calling this again after the first time does nothing.
        """
        if self._initialized:
            logger.debug("Session manager already initialized")
            return

        if self.client_side and self._unwatch is None:
            self._unwatch = self.storage.watch_state(STATE_LOGGED_IN, self._on_logged_in_change)

        name = self.storage.sync_universal(STATE_STRATEGY, self._default_strategy_name())
        if name not in self.strategies and len(self.strategies):
            fallback = self._default_strategy_name()
            logger.warning("Persisted strategy %r is not registered, using %r", name, fallback)
            self.storage.set_universal(STATE_STRATEGY, fallback)

        self._initialized = True
        logger.debug("Session initialized with strategy %r", self.strategy_name)
        await self.mounted()

    async def close(self) -> None:
        """Remove the ``loggedIn`` watcher and close the transport."""
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None
        close = getattr(self.transport, "close", None)
        if callable(close):
            await call_hook(close)

    def _default_strategy_name(self) -> str | None:
        default = self.settings.default_strategy
        if default and (default in self.strategies or not len(self.strategies)):
            return default
        names = self.strategies.names()
        return names[0] if names else default

    def _on_logged_in_change(self, logged_in: Any) -> None:
        if route_option(self.navigator.route, "auth", False):
            return
        self.redirect("home" if logged_in else "logout")

    # ── Strategies ──────────────────────────────────────────────────

    def register_strategy(self, name: str, strategy: Any) -> None:
        """Register ``strategy`` under ``name``, replacing any previous one.

        Strategies exposing a ``bind`` method receive this manager.
        """
        self.strategies.register(name, strategy)
        bind = getattr(strategy, "bind", None)
        if callable(bind):
            bind(self)

    @property
    def strategy_name(self) -> str | None:
        """Name of the active strategy."""
        return self.storage.get_state(STATE_STRATEGY)

    @property
    def strategy(self) -> Any:
        """The active strategy object, or None if it is not registered."""
        return self.strategies.get(self.strategy_name)

    async def set_strategy(self, name: str) -> None:
        """Switch to strategy ``name`` and mount it.

        Switching to the strategy that is already persisted does nothing,
        so its ``mounted`` hook is not called again.

        Raises
        ------
        AuthenticationError
            When ``name`` is not a registered strategy. Nothing is persisted.
        """
        if name == self.storage.get_universal(STATE_STRATEGY):
            return

        if name not in self.strategies:
            raise AuthenticationError(
                f"Unknown strategy {name!r}", strategy=name, method="setStrategy"
            )

        self.storage.set_universal(STATE_STRATEGY, name)
        logger.debug("Active strategy is now %r", name)
        await self.mounted()

    # ── Lifecycle ───────────────────────────────────────────────────

    async def mounted(self, *args: Any, **kwargs: Any) -> None:
        """Run the active strategy's ``mounted`` hook.

        Without the hook, fetches the user if none is set yet.
        """
        fn = get_hook(self.strategy, "mounted")
        if fn is None:
            await self.fetch_user_once()
            return
        await self._run_lifecycle("mounted", fn, *args, **kwargs)

    async def login_with(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Switch to strategy ``name`` and log in with it."""
        await self.set_strategy(name)
        return await self.login(*args, **kwargs)

    async def login(self, *args: Any, **kwargs: Any) -> Any:
        """Run the active strategy's ``login`` hook with busy tracking.

        Raises
        ------
        LoginError
            When the hook fails. Listeners receive the error with
            ``{"method": "login"}`` before it is raised.
        """
        fn = get_hook(self.strategy, "login")
        if fn is None:
            return None

        try:
            return await self._wrap_login(call_hook(fn, *args, **kwargs))
        except Exception as exc:
            error = self._as_error(exc, LoginError, "login")
            logger.warning("Login with %r failed: %s", self.strategy_name, exc)
            self.call_on_error(error, {"method": "login"})
            if error is exc:
                raise
            raise error from exc

    async def fetch_user(self, *args: Any, **kwargs: Any) -> None:
        """Run the active strategy's ``fetch_user`` hook."""
        fn = get_hook(self.strategy, "fetch_user")
        if fn is None:
            return
        await self._run_lifecycle("fetchUser", fn, *args, **kwargs)

    async def fetch_user_once(self, *args: Any, **kwargs: Any) -> None:
        """Fetch the user only if none is set."""
        if self.user is None:
            await self.fetch_user(*args, **kwargs)

    async def logout(self, *args: Any, **kwargs: Any) -> None:
        """Run the active strategy's ``logout`` hook, or ``reset()`` without one."""
        fn = get_hook(self.strategy, "logout")
        if fn is None:
            await self.reset()
            return
        await self._run_lifecycle("logout", fn, *args, **kwargs)

    async def reset(self, *args: Any, **kwargs: Any) -> None:
        """Run the active strategy's ``reset`` hook.

        Without the hook, clears the user and the active strategy's token.
        """
        fn = get_hook(self.strategy, "reset")
        if fn is None:
            self.set_user(None)
            if self.strategy_name is not None:
                self.set_token(self.strategy_name, None)
            return
        await self._run_lifecycle("reset", fn, *args, **kwargs)

    async def _run_lifecycle(
        self,
        method: str,
        fn: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> None:
        """Call a non-login hook, broadcasting and swallowing failures."""
        try:
            await call_hook(fn, *args, **kwargs)
        except Exception as exc:
            error = self._as_error(exc, StrategyLifecycleError, method)
            logger.warning("Strategy %r failed in %s: %s", self.strategy_name, method, exc)
            self.call_on_error(error, {"method": method})

    async def _wrap_login(self, awaitable: Awaitable[Any]) -> Any:
        """Await a login call with ``busy`` set and the last error cleared."""
        self.storage.set_state(STATE_BUSY, True)
        self.errors.last_error = None
        try:
            return await awaitable
        finally:
            self.storage.set_state(STATE_BUSY, False)

    def _as_error(
        self,
        exc: Exception,
        error_cls: type[AuthenticationError],
        method: str,
    ) -> Exception:
        """Wrap ``exc`` in ``error_cls`` unless it already is one."""
        if isinstance(exc, error_cls):
            return exc
        error = error_cls(
            str(exc) or type(exc).__name__,
            strategy=self.strategy_name,
            method=method,
        )
        error.__cause__ = exc
        return error

    # ── User ────────────────────────────────────────────────────────

    @property
    def user(self) -> Any:
        """The current user record, or None."""
        return self.storage.get_state(STATE_USER)

    @property
    def logged_in(self) -> bool:
        """True when a user is set."""
        return bool(self.storage.get_state(STATE_LOGGED_IN))

    @property
    def busy(self) -> bool:
        """True while a login call is in flight."""
        return bool(self.storage.get_state(STATE_BUSY))

    @property
    def error(self) -> BaseException | None:
        """The last broadcast error, cleared when a login starts."""
        return self.errors.last_error

    def set_user(self, user: Any) -> None:
        """Set the user and ``loggedIn`` together.

        Both fields are stored in one batch, so watchers of either field
        already see ``loggedIn == (user is not None)``.
        """
        self.storage.set_states({STATE_USER: user, STATE_LOGGED_IN: user is not None})

    def snapshot(self) -> SessionSnapshot:
        """Return a copy of the current session state."""
        return SessionSnapshot(
            user=self.user,
            logged_in=self.logged_in,
            strategy=self.strategy_name,
            busy=self.busy,
        )

    def has_scope(self, scope: str) -> bool | None:
        """Check the current user's scope claim; None when unknown."""
        return self.scopes.has_scope(scope)

    # ── Tokens ──────────────────────────────────────────────────────

    def get_token(self, strategy: str) -> Any:
        """Return the stored token for ``strategy``."""
        return self.tokens.get_token(strategy)

    def set_token(self, strategy: str, token: Any) -> Any:
        """Store (or clear with None) the token for ``strategy``."""
        return self.tokens.set_token(strategy, token)

    def sync_token(self, strategy: str) -> Any:
        """Re-synchronize the token for ``strategy`` from persisted storage."""
        return self.tokens.sync_token(strategy)

    # ── Requests, redirects, errors ─────────────────────────────────

    async def request(self, endpoint: dict[str, Any], defaults: Any = None) -> Any:
        """Send a request; see :meth:`RequestFacade.request`."""
        return await self.requests.request(endpoint, defaults)

    async def request_with(
        self,
        strategy: str,
        endpoint: dict[str, Any],
        defaults: Any = None,
    ) -> Any:
        """Send a request authorized with ``strategy``'s token."""
        return await self.requests.request_with(strategy, endpoint, defaults)

    def redirect(self, name: str, no_router: bool = False) -> str | None:
        """Navigate for event ``name``; see :meth:`RedirectPolicy.redirect`."""
        return self.redirects.redirect(name, no_router)

    def on_error(self, listener: ErrorListener) -> ErrorListener:
        """Register an error listener called as ``listener(error, context)``."""
        return self.errors.on_error(listener)

    def call_on_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        """Broadcast ``error`` to every listener."""
        self.errors.call_on_error(error, context)
