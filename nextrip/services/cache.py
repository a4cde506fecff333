"""
CachingFetcher - Single-flight memoization for async fetches.

Every slot moves through three states:
- EMPTY: nothing cached, nothing in flight
- PENDING: one fetch is in flight, later callers wait on it
- RESOLVED: value cached for the lifetime of the process

Transitions:
- EMPTY → PENDING: first caller starts the fetch
- PENDING → RESOLVED: fetch succeeded
- PENDING → EMPTY: fetch failed, the next caller retries
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Hashable, TypeVar

from loguru import logger

T = TypeVar("T")


class SlotState(str, Enum):
    """Cache slot states."""

    EMPTY = "EMPTY"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


@dataclass
class CacheSlot(Generic[T]):
    """Cache unit for one key (or the singleton)."""

    state: SlotState = SlotState.EMPTY
    value: T | None = None
    task: asyncio.Task[T] | None = None


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0  # fetches actually started
    deduplicated: int = 0
    failures: int = 0
    resolved: int = 0
    in_flight: int = 0

    @property
    def hit_rate(self) -> float:
        """Share of lookups served without starting a fetch."""
        total = self.hits + self.deduplicated + self.misses
        if total == 0:
            return 0.0
        return (self.hits + self.deduplicated) / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "deduplicated": self.deduplicated,
            "failures": self.failures,
            "resolved": self.resolved,
            "in_flight": self.in_flight,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


@dataclass
class _SlotTable:
    """Nested slot storage, one dict level per key."""

    arity: int
    root: CacheSlot[Any] | dict[Hashable, Any] = field(init=False)

    def __post_init__(self) -> None:
        self.root = CacheSlot() if self.arity == 0 else {}

    def slot(self, keys: tuple[Hashable, ...]) -> CacheSlot[Any]:
        """Return the slot for keys, creating containers on first use."""
        if self.arity == 0:
            return self.root

        level = self.root
        for key in keys[:-1]:
            level = level.setdefault(key, {})
        return level.setdefault(keys[-1], CacheSlot())

    def find(self, keys: tuple[Hashable, ...]) -> CacheSlot[Any] | None:
        """Return the slot for keys without creating anything."""
        if self.arity == 0:
            return self.root

        level = self.root
        for key in keys:
            if key not in level:
                return None
            level = level[key]
        return level

    def slots(self) -> list[CacheSlot[Any]]:
        if self.arity == 0:
            return [self.root]

        found: list[CacheSlot[Any]] = []
        stack = [(self.root, self.arity)]
        while stack:
            level, depth = stack.pop()
            if depth == 1:
                found.extend(level.values())
            else:
                stack.extend((child, depth - 1) for child in level.values())
        return found


class CachingFetcher(Generic[T]):
    """
    Get-or-fetch-and-memoize accessor with in-flight deduplication.

    The number of keys is fixed per instance: 0 for a singleton cache,
    1 for a keyed cache, 2 for a cache keyed by an ordered pair.

    Usage:
        routes = CachingFetcher("routes")
        data = await routes.get(fetch=lambda: client.fetch_json(url))

        stops = CachingFetcher("stops", arity=2)
        data = await stops.get("901", "0", fetch=lambda: load_stops("901", "0"))

    A slot is checked and marked PENDING without yielding to the event
    loop, so concurrent callers for one key always share a single fetch.
    """

    def __init__(self, name: str, arity: int = 0, debug: bool = False):
        if arity < 0:
            raise ValueError(f"arity must be >= 0, got {arity}")

        self.name = name
        self.arity = arity
        self._table = _SlotTable(arity)
        self._debug = debug
        self._stats = CacheStats()

    async def get(self, *keys: Hashable, fetch: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value for keys, fetching it at most once.

        Args:
            *keys: Exactly `arity` slot keys
            fetch: Zero-argument coroutine function that loads the value

        Returns:
            The resolved value, shared by all concurrent callers

        Raises:
            ValueError: If the number of keys does not match the arity
            Exception: Whatever `fetch` raised, re-raised to every waiter
        """
        self._check_keys(keys)
        slot = self._table.slot(keys)

        if slot.state is SlotState.RESOLVED:
            self._stats.hits += 1
            self._log(f"HIT: {self._describe(keys)}")
            return slot.value

        if slot.state is SlotState.PENDING:
            self._stats.deduplicated += 1
            self._log(f"DEDUPE: waiting for in-flight request {self._describe(keys)}")
        else:
            self._stats.misses += 1
            logger.debug(
                f"[CachingFetcher:{self.name}] sending request {self._describe(keys)}"
            )
            slot.state = SlotState.PENDING
            slot.task = asyncio.create_task(self._execute_and_store(slot, keys, fetch))

        return await asyncio.shield(slot.task)

    async def _execute_and_store(
        self,
        slot: CacheSlot[T],
        keys: tuple[Hashable, ...],
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        """Run the fetch and move the slot out of PENDING."""
        try:
            value = await fetch()
        except BaseException as e:
            slot.state = SlotState.EMPTY
            slot.task = None
            self._stats.failures += 1
            logger.warning(
                f"[CachingFetcher:{self.name}] request failed for "
                f"{self._describe(keys)}: {type(e).__name__}: {e}"
            )
            raise

        slot.value = value
        slot.state = SlotState.RESOLVED
        slot.task = None
        self._log(f"STORED: {self._describe(keys)}")
        return value

    def peek(self, *keys: Hashable) -> T | None:
        """Return the resolved value for keys, or None. Never fetches."""
        self._check_keys(keys)
        slot = self._table.find(keys)
        if slot is None or slot.state is not SlotState.RESOLVED:
            return None
        return slot.value

    def state(self, *keys: Hashable) -> SlotState:
        """Return the state of the slot for keys without creating it."""
        self._check_keys(keys)
        slot = self._table.find(keys)
        return slot.state if slot is not None else SlotState.EMPTY

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        slots = self._table.slots()
        self._stats.resolved = sum(1 for s in slots if s.state is SlotState.RESOLVED)
        self._stats.in_flight = sum(1 for s in slots if s.state is SlotState.PENDING)
        return self._stats

    def _check_keys(self, keys: tuple[Hashable, ...]) -> None:
        if len(keys) != self.arity:
            raise ValueError(
                f"Cache '{self.name}' takes {self.arity} key(s), got {len(keys)}"
            )

    def _describe(self, keys: tuple[Hashable, ...]) -> str:
        return "/".join(str(k) for k in keys) if keys else "(singleton)"

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CachingFetcher:{self.name}] {message}")
