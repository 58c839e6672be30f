"""Storage and navigation collaborators for authsession.

Provides the abstract interfaces the session manager consumes and
in-memory implementations for pre-render contexts and tests.
"""

from __future__ import annotations

from .base import Navigator, Storage
from .memory import MemoryNavigator, MemoryStorage
from .types import Route, SessionSnapshot


__all__ = [
    "MemoryNavigator",
    "MemoryStorage",
    "Navigator",
    "Route",
    "SessionSnapshot",
    "Storage",
]
