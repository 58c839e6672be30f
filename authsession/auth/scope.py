"""Scope checks against a claim on the current user."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..utils import get_prop


class ScopeEvaluator:
    """Reads the scope claim at ``scope_key`` off the user returned by ``get_user``.

    Parameters
    ----------
    get_user : Callable[[], Any]
        Returns the current user record (or None).
    scope_key : str
        Dotted path of the claim (default ``"scope"``).
    """

    def __init__(self, get_user: Callable[[], Any], scope_key: str = "scope") -> None:
        """Initialize the evaluator."""
        self._get_user = get_user
        self.scope_key = scope_key

    def has_scope(self, scope: str) -> bool | None:
        """Check whether the user holds ``scope``.

        Returns
        -------
        bool or None
            None when there is no user or no claim (unknown), otherwise
            membership for list-like claims and space-delimited string
            claims, and truthiness of the named entry for mapping or
            object claims.
        """
        user = self._get_user()
        claim = get_prop(user, self.scope_key) if user else None
        if not claim:
            return None

        if isinstance(claim, str):
            return scope in claim.split()
        if isinstance(claim, (list, tuple, set, frozenset)):
            return scope in claim
        return bool(get_prop(claim, scope))
