"""
Base data source interface.
"""

from abc import ABC, abstractmethod
from typing import Any

from nextrip.services.client import ServiceClient
from nextrip.settings import Settings, get_settings


def build_url(base_url: str, *segments: Any) -> str:
    """Join path segments onto a base URL."""
    return "/".join([base_url.rstrip("/"), *(str(s) for s in segments)])


class BaseDataSource(ABC):
    """
    Abstract base class for all data sources.

    All data sources should:
    - Use ServiceClient for HTTP requests
    - Let fetch and parse errors propagate to the caller
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: ServiceClient | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self._base_url = (base_url or self.settings.base_url).rstrip("/")
        self.client = client or ServiceClient(
            service_id=self.service_id,
            timeout=self.settings.request_timeout,
        )

    @property
    def base_url(self) -> str:
        """API root, fixed at construction."""
        return self._base_url

    @property
    @abstractmethod
    def service_id(self) -> str:
        """Unique identifier for this data source."""
        ...

    def url(self, *segments: Any) -> str:
        """Build a URL relative to this source's base URL."""
        return build_url(self._base_url, *segments)

    async def fetch_now(self, *segments: Any) -> Any:
        """Issue one uncached request for the given path."""
        return await self.client.fetch_json(self.url(*segments))

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
