"""Tests for the strategy registry, token facade and scope evaluator."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from authsession.auth.scope import ScopeEvaluator
from authsession.auth.strategy import Strategy, StrategyRegistry, get_hook
from authsession.auth.tokens import TokenFacade
from authsession.state.memory import MemoryStorage


class TestStrategyRegistry:
    """Tests for StrategyRegistry."""

    def test_register_and_get(self) -> None:
        """Registered strategies are returned by name."""
        registry = StrategyRegistry()
        strategy = Strategy("local")
        registry.register("local", strategy)

        assert registry.get("local") is strategy
        assert "local" in registry
        assert len(registry) == 1

    def test_overwrite_silently(self) -> None:
        """Reusing a name replaces the previous strategy."""
        registry = StrategyRegistry()
        registry.register("local", Strategy("old"))
        new = Strategy("new")
        registry.register("local", new)

        assert registry.get("local") is new
        assert registry.names() == ["local"]

    def test_missing_returns_none(self) -> None:
        """Unknown names and None return None."""
        registry = StrategyRegistry()
        assert registry.get("nope") is None
        assert registry.get(None) is None


class TestGetHook:
    """Tests for capability lookup."""

    def test_detects_implemented_hooks(self) -> None:
        """Only implemented hooks are reported."""

        class Partial(Strategy):
            async def login(self) -> None:
                """Log in."""

            reset = None

        strategy = Partial("partial")

        assert get_hook(strategy, "login") is not None
        assert get_hook(strategy, "reset") is None
        assert get_hook(strategy, "logout") is None
        assert strategy.capabilities() == frozenset({"login"})

    def test_none_strategy(self) -> None:
        """A missing strategy has no hooks."""
        assert get_hook(None, "mounted") is None

    def test_non_callable_attribute(self) -> None:
        """Non-callable attributes are not hooks."""
        assert get_hook(SimpleNamespace(login="yes"), "login") is None


class TestTokenFacade:
    """Tests for TokenFacade."""

    def test_key_uses_prefix(self) -> None:
        """Keys are prefix + strategy name."""
        storage = MemoryStorage()
        tokens = TokenFacade(storage, "auth._token.")

        tokens.set_token("local", "Bearer abc")

        assert tokens.key("local") == "auth._token.local"
        assert storage.get_universal("auth._token.local") == "Bearer abc"
        assert tokens.get_token("local") == "Bearer abc"

    def test_clear_with_none(self) -> None:
        """Setting None removes the token."""
        tokens = TokenFacade(MemoryStorage())
        tokens.set_token("local", "Bearer abc")
        tokens.set_token("local", None)

        assert tokens.get_token("local") is None

    def test_sync_restores_persisted(self) -> None:
        """sync_token mirrors a persisted token into state."""
        storage = MemoryStorage(persisted={"_token.local": "Bearer abc"})
        tokens = TokenFacade(storage)

        assert tokens.sync_token("local") == "Bearer abc"
        assert storage.get_state("_token.local") == "Bearer abc"


class TestScopeEvaluator:
    """Tests for ScopeEvaluator."""

    @pytest.mark.parametrize(
        ("user", "expected"),
        [
            (None, None),
            ({"name": "ada"}, None),
            ({"scope": []}, None),
            ({"scope": ["admin", "read"]}, True),
            ({"scope": ["read"]}, False),
            ({"scope": {"admin": True}}, True),
            ({"scope": {"admin": False}}, False),
            ({"scope": {"read": True}}, False),
            ({"scope": "read admin"}, True),
            ({"scope": "read write"}, False),
        ],
    )
    def test_has_scope(self, user, expected) -> None:
        """Unknown, list, string and mapping claims are handled."""
        evaluator = ScopeEvaluator(lambda: user)
        assert evaluator.has_scope("admin") is expected

    def test_dotted_scope_key(self) -> None:
        """The claim path may be nested."""
        user = {"claims": {"roles": ["admin"]}}
        evaluator = ScopeEvaluator(lambda: user, scope_key="claims.roles")
        assert evaluator.has_scope("admin") is True

    def test_object_user(self) -> None:
        """Claims are read from attributes of non-mapping users."""
        user = SimpleNamespace(scope=SimpleNamespace(admin=True))
        evaluator = ScopeEvaluator(lambda: user)
        assert evaluator.has_scope("admin") is True

    def test_string_claim_ignores_str_attributes(self) -> None:
        """Names of str methods are not mistaken for granted scopes."""
        evaluator = ScopeEvaluator(lambda: {"scope": "read write"})
        assert evaluator.has_scope("upper") is False
        assert evaluator.has_scope("write") is True
