from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional


logger = logging.getLogger(__name__)

COUNT_CACHE_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    value: int
    expires_at: float


class CountCache:
    """Single time-bounded cache entry for the full-table record count.

    Refreshing swaps in a new immutable entry. Two concurrent refreshes may
    both recompute; the later write wins and both values are equivalent.
    """

    def __init__(self, ttl_seconds: float = COUNT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def get(self, compute: Callable[[], int]) -> int:
        now = self._clock()
        entry = self._entry
        if entry is not None and entry.expires_at > now:
            return entry.value
        value = int(compute())
        self._entry = CacheEntry(value=value, expires_at=now + self.ttl_seconds)
        logger.debug("count cache refreshed: %s rows, ttl=%ss", value, self.ttl_seconds)
        return value

    def clear(self) -> None:
        self._entry = None
