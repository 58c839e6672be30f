"""Request transport interface and httpx-backed implementation."""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from .exceptions import RequestError
from .log import redact_sensitive_data


logger = logging.getLogger("authsession.transport")

# Endpoint keys understood by the transport; others (e.g. property_name)
# belong to the request facade.
_SPEC_KEYS = ("params", "json", "data", "content", "cookies", "timeout")


@dataclass
class TransportResponse:
    """Response returned by a transport.

    Attributes
    ----------
    status_code : int
        HTTP status code.
    data : Any
        Decoded payload (JSON when the body is JSON, else text).
    headers : dict[str, str]
        Response headers.
    """

    status_code: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class Transport(ABC):
    """Abstract request transport."""

    @abstractmethod
    async def request(self, spec: dict[str, Any]) -> TransportResponse:
        """Send a request described by ``spec``.

        Parameters
        ----------
        spec : dict[str, Any]
            ``method`` (default ``GET``), ``url``, ``headers`` and an
            optional body (``json``, ``data`` or ``content``) and
            ``params``.

        Returns
        -------
        TransportResponse
            The decoded response.

        Raises
        ------
        RequestError
            On network failures and non-2xx responses.
        """


class HttpxTransport(Transport):
    """Transport backed by a shared ``httpx.AsyncClient``.

    Parameters
    ----------
    client : httpx.AsyncClient, optional
        Client to use. When omitted one is created on first use and owned
        (closed) by this transport.
    base_url : str
        Base URL for relative endpoint URLs of an owned client.
    timeout : float
        Timeout in seconds for an owned client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = "",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the transport."""
        self._client = client
        self._owns_client = client is None
        self.base_url = base_url
        self.timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, spec: dict[str, Any]) -> TransportResponse:
        """Send the request with httpx and decode the body."""
        method = str(spec.get("method", "GET")).upper()
        url = spec.get("url", "")
        kwargs = {key: spec[key] for key in _SPEC_KEYS if key in spec}
        if spec.get("headers"):
            kwargs["headers"] = spec["headers"]

        logger.debug(
            "%s %s headers=%s", method, url, redact_sensitive_data(spec.get("headers"))
        )

        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"{method} {url} failed with status {exc.response.status_code}"
            raise RequestError(msg, status_code=exc.response.status_code, url=str(url)) from exc
        except httpx.HTTPError as exc:
            msg = f"{method} {url} failed: {exc}"
            raise RequestError(msg, url=str(url)) from exc

        return TransportResponse(
            status_code=response.status_code,
            data=_decode(response),
            headers=dict(response.headers),
        )


def _decode(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to text."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            logger.warning("Invalid JSON body from %s", response.request.url)
    return response.text
