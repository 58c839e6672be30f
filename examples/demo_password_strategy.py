"""Demo: a password-grant strategy driven by authsession.

Demonstrates the documented session patterns:

- ``Strategy`` subclasses implementing only the hooks they need
- ``auth.request`` / ``auth.request_with`` for token-authorized calls
- ``auth.on_error`` for observing lifecycle and request failures
- redirects on login/logout with return-to restore

The API server is simulated with ``httpx.MockTransport`` so the demo runs
without network access. Run::

    python examples/demo_password_strategy.py
"""

from __future__ import annotations

import asyncio
import json

import httpx

from authsession import (
    AuthSettings,
    HttpxTransport,
    LoginError,
    MemoryNavigator,
    Route,
    SessionManager,
    Strategy,
)
from authsession.log import enable_debug


# ───────────────────────────────────────────────────────────
# Strategy
# ───────────────────────────────────────────────────────────


class PasswordStrategy(Strategy):
    """Exchanges a username/password for a bearer token."""

    async def login(self, username: str, password: str) -> None:
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
        if not self.auth.get_token(self.name):
            return
        user = await self.auth.request_with(self.name, {"url": "/auth/user", "property_name": "user"})
        self.auth.set_user(user)


# ───────────────────────────────────────────────────────────
# Simulated API
# ───────────────────────────────────────────────────────────


def api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth/login":
        body = json.loads(request.content)
        if body.get("password") != "hunter2":
            return httpx.Response(401, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"token": "demo-token"})
    if request.url.path == "/auth/user":
        return httpx.Response(200, json={"user": {"name": body_name(request), "scope": ["read"]}})
    return httpx.Response(404)


def body_name(request: httpx.Request) -> str:
    return "ada" if request.headers.get("Authorization") == "Bearer demo-token" else "anonymous"


async def main() -> None:
    enable_debug()

    navigator = MemoryNavigator(Route(path="/reports", full_path="/reports?year=2024"))
    client = httpx.AsyncClient(transport=httpx.MockTransport(api), base_url="https://api.example")
    auth = SessionManager(
        transport=HttpxTransport(client),
        navigator=navigator,
        settings=AuthSettings(default_strategy="password"),
        client_side=True,
    )
    auth.register_strategy("password", PasswordStrategy("password"))
    auth.on_error(lambda error, ctx: print(f"[{ctx['method']}] {error}"))

    async with auth:
        auth.redirect("login")
        print("Now at", navigator.route.path)

        try:
            await auth.login(username="ada", password="wrong")
        except LoginError:
            print("Login rejected, busy =", auth.busy)

        await auth.login(username="ada", password="hunter2")
        print("Logged in as", auth.user["name"], "- now at", navigator.route.path)
        print("Has 'read' scope:", auth.has_scope("read"))

        await auth.logout()
        print("Logged out, now at", navigator.route.path)

    await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
