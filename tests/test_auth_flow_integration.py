"""End-to-end tests: a token strategy driving the session manager over httpx."""

# pylint: disable=redefined-outer-name

from __future__ import annotations

import json

from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from authsession import (
    AuthSettings,
    HttpxTransport,
    LoginError,
    MemoryNavigator,
    MemoryStorage,
    Route,
    SessionManager,
    Strategy,
)
from authsession.config import RedirectSettings


class PasswordStrategy(Strategy):
    """Password-grant strategy built only on the manager's public helpers."""

    async def login(self, username: str, password: str) -> None:
        assert self.auth is not None
        token = await self.auth.request(
            {
                "method": "POST",
                "url": "/auth/login",
                "json": {"username": username, "password": password},
                "property_name": "token",
            }
        )
        self.auth.set_token(self.name, f"Bearer {token}")
        await self.fetch_user()

    async def fetch_user(self) -> None:
        assert self.auth is not None
        if not self.auth.get_token(self.name):
            return
        user = await self.auth.request_with(
            self.name, {"url": "/auth/user", "property_name": "user"}
        )
        self.auth.set_user(user)

    async def logout(self) -> None:
        assert self.auth is not None
        await self.auth.request_with(self.name, {"method": "POST", "url": "/auth/logout"})
        await self.auth.reset()

    async def reset(self) -> None:
        assert self.auth is not None
        self.auth.set_user(None)
        self.auth.set_token(self.name, None)


def _api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth/login":
        body = json.loads(request.content)
        if body["password"] != "secret":
            return httpx.Response(401, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"token": "abc123"})
    if request.url.path == "/auth/user":
        if request.headers.get("Authorization") != "Bearer abc123":
            return httpx.Response(401)
        return httpx.Response(200, json={"user": {"name": "ada", "scope": ["admin"]}})
    if request.url.path == "/auth/logout":
        return httpx.Response(204)
    return httpx.Response(404)


@pytest.fixture()
def persisted() -> dict[str, Any]:
    """Persisted storage shared across simulated page loads."""
    return {}


def _manager(persisted: dict[str, Any], navigator: MemoryNavigator) -> SessionManager:
    client = httpx.AsyncClient(transport=httpx.MockTransport(_api), base_url="https://api.test")
    settings = AuthSettings(
        default_strategy="password",
        redirect=RedirectSettings(login="/login", logout="/", home="/home"),
    )
    auth = SessionManager(
        MemoryStorage(persisted),
        HttpxTransport(client),
        navigator,
        settings,
        client_side=True,
    )
    auth.register_strategy("password", PasswordStrategy("password"))
    return auth


class TestPasswordFlow:
    """Login, reload, logout round trip."""

    @pytest.mark.asyncio
    async def test_login_reload_logout(self, persisted) -> None:
        """Session survives a reload and redirects follow login/logout."""
        navigator = MemoryNavigator(Route(path="/secret"))
        auth = _manager(persisted, navigator)
        await auth.initialize()
        assert not auth.logged_in

        auth.redirect("login")
        assert navigator.route.path == "/login"

        await auth.login_with("password", username="ada", password="secret")

        assert auth.logged_in
        assert auth.user == {"name": "ada", "scope": ["admin"]}
        assert auth.has_scope("admin") is True
        assert persisted["_token.password"] == "Bearer abc123"
        # Return-to restored by the loggedIn watcher
        assert navigator.history[-1] == ("redirect", "/secret")

        # Simulated reload: new manager, same persisted storage
        reloaded_nav = MemoryNavigator(Route(path="/secret"))
        reloaded = _manager(persisted, reloaded_nav)
        await reloaded.initialize()
        assert reloaded.strategy_name == "password"
        assert reloaded.user == {"name": "ada", "scope": ["admin"]}

        await reloaded.logout()
        assert not reloaded.logged_in
        assert "_token.password" not in persisted
        assert reloaded_nav.history[-1] == ("redirect", "/")

        await auth.close()
        await reloaded.close()

    @pytest.mark.asyncio
    async def test_bad_password(self, persisted) -> None:
        """Login failures reach listeners twice (request, login) and the caller once."""
        auth = _manager(persisted, MemoryNavigator(Route(path="/login")))
        listener = MagicMock()
        auth.on_error(listener)
        await auth.initialize()

        with pytest.raises(LoginError) as exc_info:
            await auth.login(username="ada", password="wrong")

        methods = [c.args[1]["method"] for c in listener.call_args_list]
        assert methods == ["request", "login"]
        assert exc_info.value.__cause__.status_code == 401
        assert not auth.busy
        assert not auth.logged_in
        await auth.close()
