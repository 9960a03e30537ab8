"""
Cache-aside orchestration for the jokes list.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import DataFetchError, JokesUnavailableError
from .cache.jokes_cache import JokesCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


CACHE_TYPE = "jokes"


class JokesFetcher(Protocol):
    async def fetch_all_jokes(self) -> List[Dict[str, Any]]:
        ...


class JokesProvider:
    """Serves jokes from the cache, refilling it from the store on a miss.

    A failed refill falls back to whatever the cache holds, however old.
    Only a failure with nothing cached is reported to the caller.

    Concurrent misses each run their own fetch unless ``single_flight`` is
    set, in which case they await one shared in-flight fetch.
    """

    def __init__(
        self,
        cache: JokesCache,
        fetcher: JokesFetcher,
        *,
        metrics: Optional["MetricsCollector"] = None,
        single_flight: bool = False,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.metrics = metrics
        self.single_flight = single_flight
        self.logger = get_logger("jokes.provider")
        self._inflight: Optional[asyncio.Future] = None

    async def get_jokes(self) -> List[Dict[str, Any]]:
        """Return the jokes list.

        Raises:
            JokesUnavailableError: the fetch failed and the cache is empty.
        """
        if self.cache.is_valid():
            self._increment("cache_hits_total")
            return self.cache.get()

        self._increment("cache_misses_total")

        try:
            return await self._refill()
        except DataFetchError as e:
            if self.metrics:
                self.metrics.record_error(e.code)

            if self.cache.has_any():
                self._increment("stale_fallbacks_total")
                self.logger.warning(
                    "Jokes fetch failed, serving stale cache",
                    code=e.code,
                    age_seconds=self.cache.age_seconds(),
                    records=len(self.cache.get())
                )
                return self.cache.get()

            self.logger.error("Jokes fetch failed with nothing cached", code=e.code)
            raise JokesUnavailableError(details={"cause": e.code}) from e

    async def _refill(self) -> List[Dict[str, Any]]:
        if not self.single_flight:
            return await self._fetch_and_update()

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch_and_update())
            self._inflight.add_done_callback(self._clear_inflight)
        else:
            self.logger.debug("Joining in-flight jokes fetch")

        return await asyncio.shield(self._inflight)

    async def _fetch_and_update(self) -> List[Dict[str, Any]]:
        jokes = await self.fetcher.fetch_all_jokes()
        self.cache.update(jokes)
        self.logger.info("Jokes cache refilled", records=len(jokes))
        return jokes

    def _clear_inflight(self, future: asyncio.Future):
        if self._inflight is future:
            self._inflight = None

    def _increment(self, metric_name: str):
        if self.metrics:
            self.metrics.increment_counter(metric_name, cache_type=CACHE_TYPE)
