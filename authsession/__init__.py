"""authsession - client-side authentication session orchestration.

Manages pluggable authentication strategies, keeps session state in a
storage backend, injects authorization tokens into outgoing requests,
redirects on login/logout without loops and broadcasts errors to
listeners.
"""

from __future__ import annotations

from .auth import (
    RedirectPolicy,
    RequestFacade,
    ScopeEvaluator,
    SessionManager,
    Strategy,
    StrategyRegistry,
    TokenFacade,
)
from .callbacks import ErrorBus
from .config import AuthSettings, get_settings
from .exceptions import (
    AuthenticationError,
    AuthSessionException,
    LoginError,
    NoTokenError,
    RequestError,
    StrategyLifecycleError,
)
from .state import MemoryNavigator, MemoryStorage, Navigator, Route, Storage
from .transport import HttpxTransport, Transport, TransportResponse


__version__ = "0.1.0"

__all__ = [
    "AuthSessionException",
    "AuthSettings",
    "AuthenticationError",
    "ErrorBus",
    "HttpxTransport",
    "LoginError",
    "MemoryNavigator",
    "MemoryStorage",
    "Navigator",
    "NoTokenError",
    "RedirectPolicy",
    "RequestError",
    "RequestFacade",
    "Route",
    "ScopeEvaluator",
    "SessionManager",
    "Storage",
    "Strategy",
    "StrategyLifecycleError",
    "StrategyRegistry",
    "TokenFacade",
    "Transport",
    "TransportResponse",
    "get_settings",
]
