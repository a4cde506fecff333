"""
Metro Transit Nextrip API data source.

API Documentation: https://svc.metrotransit.org/swagger/index.html
No API key required.

Route lists, agencies, directions and stops change rarely and are
memoized for the lifetime of the source. Departures, stop details and
vehicle positions are live data and are fetched on every call.
"""

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict

from nextrip.datasource.base import BaseDataSource
from nextrip.services.cache import CacheStats, CachingFetcher
from nextrip.services.client import ServiceClient
from nextrip.settings import Settings


class Route(BaseModel):
    """Nextrip v2 route record."""

    model_config = ConfigDict(extra="ignore")

    route_id: str
    agency_id: int | str
    route_label: str


class NextripSource(BaseDataSource):
    """
    Nextrip API data source.

    Usage:
        async with NextripSource() as nextrip:
            routes = await nextrip.get_routes()
            stops = await nextrip.get_stops("901", "0")
    """

    SERVICE_ID = "nextrip"

    def __init__(
        self,
        base_url: str | None = None,
        client: ServiceClient | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(base_url=base_url, client=client, settings=settings)
        debug = self.settings.debug

        self._routes: CachingFetcher[Any] = CachingFetcher("routes", debug=debug)
        self._agencies: CachingFetcher[Any] = CachingFetcher("agencies", debug=debug)
        self._directions: CachingFetcher[Any] = CachingFetcher(
            "directions", arity=1, debug=debug
        )
        self._stops: CachingFetcher[Any] = CachingFetcher("stops", arity=2, debug=debug)

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    # Memoized endpoints

    async def get_routes(self) -> Any:
        """All routes currently served."""
        return await self._routes.get(fetch=lambda: self.fetch_now("routes"))

    async def get_agencies(self) -> Any:
        """All agencies operating routes."""
        return await self._agencies.get(fetch=lambda: self.fetch_now("agencies"))

    async def get_directions(self, route_id: str) -> Any:
        """
        Directions of travel for a route.

        Args:
            route_id: A valid Nextrip route ID (e.g., "901")
        """
        return await self._directions.get(
            route_id,
            fetch=lambda: self.fetch_now("directions", route_id),
        )

    async def get_stops(self, route_id: str, direction_id: str) -> Any:
        """
        Timepoint stops for a route in one direction.

        Args:
            route_id: A valid Nextrip route ID
            direction_id: Direction ID as returned by get_directions (e.g., "0")
        """
        return await self._stops.get(
            route_id,
            direction_id,
            fetch=lambda: self.fetch_now("stops", route_id, direction_id),
        )

    async def get_route_models(self) -> list[Route]:
        """Cached routes validated into Route models."""
        routes = await self.get_routes()
        models = [Route.model_validate(item) for item in routes]
        logger.debug(f"Validated {len(models)} Nextrip routes")
        return models

    # Live endpoints, never cached

    async def get_location(
        self, route_id: str, direction_id: str, place_code: str
    ) -> Any:
        """
        Location info for a place code: stops, alerts and departures.

        Departures are time-sensitive, so this always hits the API.
        """
        return await self.fetch_now(route_id, direction_id, place_code)

    async def get_stop(self, stop_id: str | int) -> Any:
        """Stop info and departures for a stop ID."""
        return await self.fetch_now(stop_id)

    async def get_vehicles(self, route_id: str | int) -> Any:
        """
        Current vehicles serving a route.

        Args:
            route_id: A valid Nextrip route ID
        """
        return await self.fetch_now("vehicles", route_id)

    def get_stats(self) -> dict[str, CacheStats]:
        """Statistics for each memoized endpoint."""
        return {
            cache.name: cache.get_stats()
            for cache in (self._routes, self._agencies, self._directions, self._stops)
        }
