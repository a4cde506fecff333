"""
Service layer infrastructure for the Nextrip client.

Provides:
- CachingFetcher: Single-flight memoization over zero, one or two keys
- ServiceClient: Async JSON-over-HTTP client
"""

from nextrip.services.errors import (
    ServiceError,
    TransportError,
    RequestTimeoutError,
    ParseError,
)
from nextrip.services.cache import CachingFetcher, CacheSlot, CacheStats, SlotState
from nextrip.services.client import ServiceClient

__all__ = [
    # Errors
    "ServiceError",
    "TransportError",
    "RequestTimeoutError",
    "ParseError",
    # Cache
    "CachingFetcher",
    "CacheSlot",
    "CacheStats",
    "SlotState",
    # Client
    "ServiceClient",
]
