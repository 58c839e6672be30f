"""Tests for the httpx-backed transport."""

from __future__ import annotations

import json

import httpx
import pytest

from authsession.exceptions import RequestError
from authsession.transport import HttpxTransport


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://api.test")


class TestHttpxTransport:
    """Tests for HttpxTransport."""

    @pytest.mark.asyncio
    async def test_json_response(self) -> None:
        """JSON bodies are decoded and request fields forwarded."""
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = request.content
            return httpx.Response(200, json={"user": {"name": "ada"}})

        client = _client(handler)
        transport = HttpxTransport(client)

        response = await transport.request(
            {
                "method": "post",
                "url": "/login",
                "headers": {"Authorization": "Bearer abc"},
                "json": {"username": "ada"},
                "property_name": "user",
            }
        )

        assert response.status_code == 200
        assert response.data == {"user": {"name": "ada"}}
        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.test/login"
        assert seen["auth"] == "Bearer abc"
        assert json.loads(seen["body"]) == {"username": "ada"}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_text_response(self) -> None:
        """Non-JSON bodies are returned as text."""
        client = _client(lambda request: httpx.Response(200, text="pong"))
        response = await HttpxTransport(client).request({"url": "/ping"})
        assert response.data == "pong"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_response(self) -> None:
        """Empty bodies decode to None."""
        client = _client(lambda request: httpx.Response(204))
        response = await HttpxTransport(client).request({"url": "/logout", "method": "POST"})
        assert response.data is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_status_error(self) -> None:
        """Non-2xx responses raise RequestError with the status code."""
        client = _client(lambda request: httpx.Response(401, json={"error": "nope"}))

        with pytest.raises(RequestError) as exc_info:
            await HttpxTransport(client).request({"url": "/me"})

        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        """Connection failures raise RequestError without a status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)

        with pytest.raises(RequestError) as exc_info:
            await HttpxTransport(client).request({"url": "/me"})

        assert exc_info.value.status_code is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_close_only_owned_client(self) -> None:
        """A caller-supplied client is left open; an owned one is closed."""
        client = _client(lambda request: httpx.Response(200))
        await HttpxTransport(client).close()
        assert not client.is_closed
        await client.aclose()

        owned = HttpxTransport(base_url="https://api.test")
        created = await owned._get_client()  # pylint: disable=protected-access
        await owned.close()
        assert created.is_closed
