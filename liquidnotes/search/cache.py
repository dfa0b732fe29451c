"""Short-lived memoization of lexical search results."""

import logging
import time
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE_SECONDS = 0.5
DEFAULT_MAX_ENTRIES = 50


class CacheEntry(BaseModel):
    """Matching note IDs for one raw query string and when they were computed."""

    note_ids: list[str]
    computed_at: float


class QueryCache:
    """Caches result note IDs per raw query string for a short throttle window.

    Keys are the raw, unnormalized query strings. When a new key would push the
    cache past ``max_entries`` the whole cache is cleared first; there is no
    per-entry eviction. Not thread safe: only the owning orchestrator touches it.
    """

    def __init__(
        self,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.throttle_seconds = throttle_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def lookup_or_compute(self, raw_query: str, compute: Callable[[], list[str]]) -> list[str]:
        """Return cached note IDs for the query, recomputing when stale or missing.

        Args:
            raw_query: Query string exactly as issued
            compute: Produces the ordered matching note IDs on a miss

        Returns:
            Ordered note IDs matching the query
        """
        now = self._clock()
        entry = self._entries.get(raw_query)
        if entry is not None and now - entry.computed_at < self.throttle_seconds:
            return list(entry.note_ids)

        note_ids = list(compute())

        if raw_query not in self._entries and len(self._entries) >= self.max_entries:
            logger.debug(f"Query cache reached {len(self._entries)} entries, clearing")
            self._entries.clear()

        self._entries[raw_query] = CacheEntry(note_ids=note_ids, computed_at=now)
        return list(note_ids)

    def clear(self) -> None:
        """Drop every cached result."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, raw_query: str) -> bool:
        return raw_query in self._entries
