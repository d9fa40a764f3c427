"""HTTP transport for signed requests."""

from __future__ import annotations

import logging

import httpx

from rtm_api.config import DEFAULT_TIMEOUT
from rtm_api.exceptions import RtmApiError, TransportError
from rtm_api.request import Request

logger = logging.getLogger(__name__)


class Transport:
    """Sends a Request over HTTP and returns the raw body.

    Exactly one network call per ``send``; nothing is retried or cached.

    Example:
        >>> with Transport(timeout=10.0) as transport:
        ...     body = transport.send(request)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Seconds before a call is abandoned.
            transport: Optional httpx transport (e.g., httpx.MockTransport).
        """
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def send(self, request: Request) -> bytes:
        """Perform the HTTP call for ``request``.

        Args:
            request: The request to send.

        Returns:
            Raw response body.

        Raises:
            TransportError: On timeout, connection failure or HTTP 5xx.
            RtmApiError: On any other non-2xx status.
        """
        logger.debug(f"{request.http_method} {request.endpoint} ({request.method})")

        try:
            if request.http_method == "POST":
                response = self._client.post(request.endpoint, data=request.as_dict())
            else:
                response = self._client.get(request.endpoint, params=list(request.params))
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}") from e

        if response.status_code >= 500:
            raise TransportError(
                f"Server error: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise RtmApiError(f"Unexpected HTTP {response.status_code}: {response.text[:200]}")

        return response.content

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
