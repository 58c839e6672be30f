"""Generic and authenticated request helpers over the transport."""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from ..exceptions import NoTokenError, RequestError
from ..log import redact_sensitive_data
from ..utils import get_prop, is_unset


if TYPE_CHECKING:
    from ..callbacks import ErrorBus
    from ..transport import Transport
    from .tokens import TokenFacade


logger = logging.getLogger("authsession.auth")


def merge_endpoint(endpoint: dict[str, Any], defaults: Any = None) -> dict[str, Any]:
    """Shallow-merge ``defaults`` under ``endpoint``; endpoint fields win.

    Non-dict ``defaults`` are ignored. Always returns a new dict.
    """
    if isinstance(defaults, dict):
        return {**defaults, **endpoint}
    return dict(endpoint)


class RequestFacade:
    """Issues requests and funnels failures into the error bus.

    Parameters
    ----------
    transport : Transport
        The request transport.
    tokens : TokenFacade
        Token lookup for authenticated requests.
    errors : ErrorBus
        Bus that receives every failure.
    header_name : str
        Header the token is injected under (default ``Authorization``).
    """

    def __init__(
        self,
        transport: Transport,
        tokens: TokenFacade,
        errors: ErrorBus,
        header_name: str = "Authorization",
    ) -> None:
        """Initialize the request facade."""
        self.transport = transport
        self.tokens = tokens
        self.errors = errors
        self.header_name = header_name

    async def request(self, endpoint: dict[str, Any], defaults: Any = None) -> Any:
        """Send a request and return its payload.

        Parameters
        ----------
        endpoint : dict[str, Any]
            Request description (``method``, ``url``, ``headers``, body).
            An optional ``property_name`` selects a dotted field of the
            response payload to return.
        defaults : dict[str, Any], optional
            Fields applied under ``endpoint``.

        Returns
        -------
        Any
            The selected field, or the full payload.

        Raises
        ------
        RequestError
            When the transport fails; broadcast first with
            ``{"method": "request"}``.
        """
        spec = merge_endpoint(endpoint, defaults)

        try:
            response = await self.transport.request(spec)
        except Exception as exc:
            error = exc if isinstance(exc, RequestError) else _wrap_request_error(exc, spec)
            logger.warning("Request to %s failed: %s", spec.get("url"), error)
            self.errors.call_on_error(error, {"method": "request"})
            if error is exc:
                raise
            raise error from exc

        property_name = spec.get("property_name")
        if property_name:
            return get_prop(response.data, property_name)
        return response.data

    async def request_with(
        self,
        strategy: str,
        endpoint: dict[str, Any],
        defaults: Any = None,
    ) -> Any:
        """Send a request authorized with ``strategy``'s token.

        The token is injected unmodified under the configured header
        unless the caller already set that header.

        Raises
        ------
        NoTokenError
            When no token is stored for ``strategy``. The transport is
            not called.
        """
        token = self.tokens.get_token(strategy)
        if is_unset(token):
            error = NoTokenError("No Token", strategy=strategy, method="requestWith")
            self.errors.call_on_error(error, {"method": "requestWith"})
            raise error

        spec = merge_endpoint(endpoint, defaults)
        headers = dict(spec.get("headers") or {})
        wanted = self.header_name.lower()
        if not any(value for key, value in headers.items() if key.lower() == wanted):
            headers[self.header_name] = token
        spec["headers"] = headers

        logger.debug("Authorized request for %s: %s", strategy, redact_sensitive_data(headers))
        return await self.request(spec)


def _wrap_request_error(exc: Exception, spec: dict[str, Any]) -> RequestError:
    """Wrap a transport exception in a RequestError."""
    status_code = getattr(getattr(exc, "response", None), "status_code", None)
    return RequestError(
        str(exc) or type(exc).__name__,
        status_code=status_code,
        url=spec.get("url"),
    )
