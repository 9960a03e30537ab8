"""
PostgreSQL persistence layer for Jokes Service.
"""

import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import asyncpg
from shared.logging import get_logger
from shared.errors import (
    ServiceException,
    DataFetchError,
    DatabaseConnectionError,
    DatabaseQueryError,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


FETCH_ALL_JOKES = "SELECT * FROM jokes"


class JokesRepository:
    """Read-only access to the jokes relation."""

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        host: str = "localhost",
        port: int = 5432,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        pool_size: int = 10,
        acquire_timeout: Optional[float] = None,
        command_timeout: Optional[float] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.dsn = dsn
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.pool_size = pool_size
        self.acquire_timeout = acquire_timeout
        self.command_timeout = command_timeout
        self.metrics = metrics
        self.logger = get_logger("jokes.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                min_size=0,
                max_size=self.pool_size,
                command_timeout=self.command_timeout
            )

            self.logger.info("PostgreSQL persistence started", pool_size=self.pool_size)

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise ServiceException("POSTGRES_START_FAILED", str(e))

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def fetch_all_jokes(self) -> List[Dict[str, Any]]:
        """Fetch every row of the jokes relation in the store's natural order.

        The pooled connection is released on every exit path before the
        result or error reaches the caller.

        Raises:
            DatabaseConnectionError: no connection could be acquired.
            DatabaseQueryError: the query failed on a live connection.
        """
        if self.pool is None:
            self.logger.error("Error getting database connection", error="pool not started")
            raise DatabaseConnectionError(details={"reason": "pool not started"})

        start_time = time.time()
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                try:
                    rows = await conn.fetch(FETCH_ALL_JOKES)
                except Exception as e:
                    self.logger.error("Error fetching jokes", error=str(e), error_type=type(e).__name__)
                    raise DatabaseQueryError(details={"error_type": type(e).__name__}) from e

        except DataFetchError:
            self._observe("error", start_time)
            raise
        except Exception as e:
            self._observe("error", start_time)
            self.logger.error("Error getting database connection", error=str(e), error_type=type(e).__name__)
            raise DatabaseConnectionError(details={"error_type": type(e).__name__}) from e

        self._observe("success", start_time)
        return [dict(row) for row in rows]

    async def health_check(self) -> bool:
        """Check database health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                await conn.fetchval("SELECT 1")
                return True
        except Exception:
            return False

    def _observe(self, outcome: str, start_time: float):
        if self.metrics:
            self.metrics.observe_histogram(
                "db_fetch_duration_seconds",
                time.time() - start_time,
                outcome=outcome,
            )
