"""
In-process cache for the jokes result set.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from shared.logging import get_logger


Record = Dict[str, Any]

DEFAULT_CACHE_DURATION = 300  # 5 minutes


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of the single cache slot."""

    data: List[Record] = field(default_factory=list)
    last_updated: Optional[float] = None
    is_valid: bool = False


class JokesCache:
    """Single-slot cache with a wall-clock freshness window.

    Expired data is never purged; only its "fresh" classification lapses, so a
    populated cache stays available as a fallback for the process lifetime.
    """

    def __init__(
        self,
        cache_duration: float = DEFAULT_CACHE_DURATION,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_duration = cache_duration
        self.clock = clock
        self.logger = get_logger("jokes.cache")
        self._entry = CacheEntry()

    @property
    def entry(self) -> CacheEntry:
        return self._entry

    def is_valid(self) -> bool:
        """Return True if the cached data is still inside the freshness window."""
        entry = self._entry
        return (
            entry.is_valid
            and entry.last_updated is not None
            and (self.clock() - entry.last_updated) < self.cache_duration
        )

    def get(self) -> List[Record]:
        """Return cached data as stored, fresh or not."""
        return self._entry.data

    def update(self, new_data: List[Record]) -> None:
        """Replace the cached data wholesale and mark it fresh."""
        self._entry = CacheEntry(
            data=new_data,
            last_updated=self.clock(),
            is_valid=True,
        )
        self.logger.debug("Cache refilled", records=len(new_data))

    def has_any(self) -> bool:
        """Return True if any data was ever cached."""
        return len(self._entry.data) > 0

    def age_seconds(self) -> Optional[float]:
        if self._entry.last_updated is None:
            return None
        return self.clock() - self._entry.last_updated

    def stats(self) -> Dict[str, Any]:
        """Describe the cache slot for diagnostics."""
        entry = self._entry
        last_updated = None
        if entry.last_updated is not None:
            last_updated = datetime.fromtimestamp(entry.last_updated, tz=timezone.utc).isoformat()

        age = self.age_seconds()
        return {
            "valid": self.is_valid(),
            "records": len(entry.data),
            "last_updated": last_updated,
            "age_seconds": round(age, 3) if age is not None else None,
            "cache_duration_seconds": self.cache_duration,
        }
