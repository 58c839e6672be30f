"""Authentication session orchestration.

Provides the session manager, the strategy registry and the token,
request, redirect and scope helpers it composes.
"""

from __future__ import annotations

from .redirect import RedirectPolicy
from .request import RequestFacade, merge_endpoint
from .scope import ScopeEvaluator
from .session import SessionManager
from .strategy import HOOKS, Strategy, StrategyRegistry, get_hook
from .tokens import TokenFacade


__all__ = [
    "HOOKS",
    "RedirectPolicy",
    "RequestFacade",
    "ScopeEvaluator",
    "SessionManager",
    "Strategy",
    "StrategyRegistry",
    "TokenFacade",
    "get_hook",
    "merge_endpoint",
]
