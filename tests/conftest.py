"""Pytest configuration and fixtures."""

# pylint: disable=redefined-outer-name

from __future__ import annotations

import sys

from pathlib import Path

import pytest

from authsession.auth.session import SessionManager
from authsession.config import AuthSettings, LogSettings, RedirectSettings, TokenSettings
from authsession.state.memory import MemoryNavigator, MemoryStorage
from authsession.state.types import Route
from tests.helpers import FakeTransport


# Add the project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture()
def settings() -> AuthSettings:
    """Settings with explicit, environment-independent values."""
    return AuthSettings(
        default_strategy="local",
        scope_key="scope",
        token=TokenSettings(prefix="_token.", name="Authorization"),
        redirect=RedirectSettings(
            enabled=True,
            login="/login",
            logout="/",
            home="/home",
            callback="/callback",
            rewrite=True,
            full_path=False,
        ),
        log=LogSettings(level="WARNING"),
    )


@pytest.fixture()
def storage() -> MemoryStorage:
    """Create a fresh memory storage."""
    return MemoryStorage()


@pytest.fixture()
def navigator() -> MemoryNavigator:
    """Create a navigator sitting on /secret."""
    return MemoryNavigator(Route(path="/secret", full_path="/secret?tab=2"))


@pytest.fixture()
def transport() -> FakeTransport:
    """Create a recording transport returning a user payload."""
    return FakeTransport(data={"user": {"name": "ada", "scope": ["read"]}})


@pytest.fixture()
def auth(
    storage: MemoryStorage,
    transport: FakeTransport,
    navigator: MemoryNavigator,
    settings: AuthSettings,
) -> SessionManager:
    """Create a server-side session manager."""
    return SessionManager(storage, transport, navigator, settings)


@pytest.fixture()
def client_auth(
    storage: MemoryStorage,
    transport: FakeTransport,
    navigator: MemoryNavigator,
    settings: AuthSettings,
) -> SessionManager:
    """Create a client-side session manager."""
    return SessionManager(storage, transport, navigator, settings, client_side=True)
