"""
Shared fixtures: a fake Nextrip API served through httpx.MockTransport.
"""

import asyncio
from collections import Counter

import httpx
import pytest
from loguru import logger

from nextrip.datasource import NextripSource
from nextrip.services.client import ServiceClient
from nextrip.settings import Settings

BASE_URL = "https://nextrip.test/nextrip"


class FakeNextripAPI:
    """Canned responses keyed by path, with per-path request counts."""

    def __init__(self):
        self.calls: Counter[str] = Counter()
        self.payloads: dict[str, object] = {}
        self.failures: dict[str, list[Exception | httpx.Response]] = {}
        self.gate: asyncio.Event | None = None

    def serve(self, path: str, payload) -> None:
        self.payloads[path] = payload

    def fail_next(self, path: str, failure: Exception | httpx.Response) -> None:
        self.failures.setdefault(path, []).append(failure)

    def count(self, path: str) -> int:
        return self.calls[path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/nextrip/")
        self.calls[path] += 1

        if self.gate is not None:
            await self.gate.wait()

        pending = self.failures.get(path)
        if pending:
            failure = pending.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return failure

        if path not in self.payloads:
            return httpx.Response(404, json={"detail": f"no route {path}"})
        return httpx.Response(200, json=self.payloads[path])


@pytest.fixture
def api() -> FakeNextripAPI:
    api = FakeNextripAPI()
    api.serve(
        "routes",
        [
            {"route_id": "901", "agency_id": 10, "route_label": "METRO Blue Line"},
            {"route_id": "902", "agency_id": 10, "route_label": "METRO Green Line"},
        ],
    )
    api.serve("agencies", [{"agency_id": 10, "agency_name": "Metro Transit"}])
    api.serve(
        "directions/901",
        [
            {"direction_id": 0, "direction_name": "Northbound"},
            {"direction_id": 1, "direction_name": "Southbound"},
        ],
    )
    api.serve("stops/901/0", [{"place_code": "MAAM", "description": "Mall of America"}])
    api.serve("stops/901/1", [{"place_code": "TF1", "description": "Target Field"}])
    api.serve("vehicles/901", [{"trip_id": "t1", "latitude": 44.97, "longitude": -93.27}])
    api.serve("901/0/MAAM", {"stops": [], "alerts": [], "departures": []})
    api.serve("51408", {"stops": [{"stop_id": 51408}], "departures": []})
    return api


@pytest.fixture
def client(api: FakeNextripAPI) -> ServiceClient:
    return ServiceClient(
        service_id="nextrip",
        timeout=5.0,
        transport=httpx.MockTransport(api.handler),
    )


@pytest.fixture
async def nextrip(client: ServiceClient):
    source = NextripSource(base_url=BASE_URL, client=client, settings=Settings())
    yield source
    await source.close()


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(str(m)), level="DEBUG", format="{level} {message}"
    )
    yield messages
    logger.remove(handler_id)
