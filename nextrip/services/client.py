"""
ServiceClient - Async HTTP client that fetches and parses JSON.

Transport and parse failures are mapped onto the service error
taxonomy and raised to the caller. Nothing is retried or cached here.
"""

from typing import Any

import httpx
from loguru import logger

from nextrip.services.errors import (
    ParseError,
    RequestTimeoutError,
    TransportError,
)


class ServiceClient:
    """
    Thin JSON-over-HTTP client.

    Usage:
        client = ServiceClient(service_id="nextrip")
        routes = await client.fetch_json("https://svc.metrotransit.org/nextrip/routes")
        await client.close()

    Tests can pass an ``httpx.MockTransport`` as ``transport``.
    """

    def __init__(
        self,
        service_id: str = "nextrip",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service_id = service_id
        self._timeout = timeout
        self._headers = headers or {"Accept": "application/json"}
        self._transport = transport

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http_client

    async def fetch_json(self, url: str) -> Any:
        """
        GET a URL and parse the body as JSON.

        Args:
            url: Full URL to request

        Returns:
            The decoded JSON payload, passed through untouched

        Raises:
            RequestTimeoutError: If the request times out
            TransportError: On network errors or non-2xx status
            ParseError: If the body is not valid JSON
        """
        client = await self._get_http_client()
        logger.debug(f"[{self.service_id}] GET {url}")

        try:
            response = await client.get(url)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self.service_id, self._timeout, url=url) from e

        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                service_id=self.service_id,
                url=url,
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            raise TransportError(str(e), service_id=self.service_id, url=url) from e

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(
                f"Invalid JSON from {url}: {e}",
                service_id=self.service_id,
                url=url,
            ) from e

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug(f"[{self.service_id}] ServiceClient closed")

    async def __aenter__(self) -> "ServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
