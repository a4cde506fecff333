"""
Caching client for the Metro Transit Nextrip API.
"""

from nextrip.datasource import NextripSource, Route
from nextrip.services import (
    CachingFetcher,
    ParseError,
    RequestTimeoutError,
    ServiceClient,
    ServiceError,
    SlotState,
    TransportError,
)

__all__ = [
    "NextripSource",
    "Route",
    "CachingFetcher",
    "SlotState",
    "ServiceClient",
    "ServiceError",
    "TransportError",
    "RequestTimeoutError",
    "ParseError",
]
