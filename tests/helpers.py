"""Shared test doubles."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

from authsession.transport import Transport, TransportResponse


class FakeTransport(Transport):
    """Transport that records request specs and returns canned data."""

    def __init__(self, data: Any = None, error: Exception | None = None) -> None:
        self.data = data
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def request(self, spec: dict[str, Any]) -> TransportResponse:
        self.calls.append(spec)
        if self.error is not None:
            raise self.error
        return TransportResponse(status_code=200, data=self.data)


def make_strategy(*hooks: str) -> MagicMock:
    """Create a strategy mock implementing only ``hooks`` (as AsyncMocks)."""
    strategy = MagicMock(spec=list(hooks))
    for hook in hooks:
        setattr(strategy, hook, AsyncMock(return_value=None))
    return strategy
