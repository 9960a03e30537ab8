"""
Unit tests for the jokes PostgreSQL repository.
"""

import pytest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_jokes.app.persistence.postgres import JokesRepository, FETCH_ALL_JOKES
from shared.errors import ServiceException, DatabaseConnectionError, DatabaseQueryError
from shared.metrics import MetricsCollector


class FakeConnection:
    """Connection stub answering a single query."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.queries = []

    async def fetch(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.rows

    async def fetchval(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return 1


class FakePool:
    """Pool stub that counts acquisitions and releases."""

    def __init__(self, connection=None, acquire_error=None):
        self.connection = connection or FakeConnection()
        self.acquire_error = acquire_error
        self.acquired = 0
        self.released = 0
        self.timeouts = []
        self.closed = False

    @asynccontextmanager
    async def acquire(self, timeout=None):
        self.timeouts.append(timeout)
        if self.acquire_error:
            raise self.acquire_error
        self.acquired += 1
        try:
            yield self.connection
        finally:
            self.released += 1

    async def close(self):
        self.closed = True


class TestJokesRepository:
    """Test cases for JokesRepository."""

    @pytest.fixture
    def mock_rows(self):
        return [
            {"id": 2, "text": "second"},
            {"id": 1, "text": "first"},
            {"id": 3, "text": "third"}
        ]

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("jokes")

    @pytest.fixture
    def repository(self, metrics):
        return JokesRepository(metrics=metrics)

    @pytest.mark.asyncio
    async def test_fetch_returns_rows_in_store_order(self, repository, mock_rows):
        """Rows come back as dicts in the order the store returned them."""
        pool = FakePool(FakeConnection(rows=mock_rows))
        repository.pool = pool

        result = await repository.fetch_all_jokes()

        assert result == mock_rows
        assert all(isinstance(row, dict) for row in result)
        assert pool.connection.queries == [FETCH_ALL_JOKES]
        assert FETCH_ALL_JOKES == "SELECT * FROM jokes"

    @pytest.mark.asyncio
    async def test_fetch_releases_connection_on_success(self, repository, mock_rows):
        pool = FakePool(FakeConnection(rows=mock_rows))
        repository.pool = pool

        await repository.fetch_all_jokes()

        assert pool.acquired == 1
        assert pool.released == 1

    @pytest.mark.asyncio
    async def test_query_error_raises_and_releases(self, repository):
        """A failing query raises DatabaseQueryError after releasing the connection."""
        pool = FakePool(FakeConnection(error=RuntimeError('relation "jokes" does not exist')))
        repository.pool = pool

        with pytest.raises(DatabaseQueryError) as exc_info:
            await repository.fetch_all_jokes()

        assert exc_info.value.code == "DATABASE_QUERY_ERROR"
        assert exc_info.value.details == {"error_type": "RuntimeError"}
        assert pool.acquired == 1
        assert pool.released == 1

    @pytest.mark.asyncio
    async def test_acquire_error_raises_connection_error(self, repository):
        pool = FakePool(acquire_error=OSError("connection refused"))
        repository.pool = pool

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await repository.fetch_all_jokes()

        assert exc_info.value.code == "DATABASE_CONNECTION_ERROR"
        assert isinstance(exc_info.value.__cause__, OSError)
        assert pool.acquired == 0
        assert pool.released == 0

    @pytest.mark.asyncio
    async def test_fetch_without_pool_raises_connection_error(self, repository):
        with pytest.raises(DatabaseConnectionError):
            await repository.fetch_all_jokes()

    @pytest.mark.asyncio
    async def test_acquire_uses_configured_timeout(self, mock_rows):
        repository = JokesRepository(acquire_timeout=2.5)
        pool = FakePool(FakeConnection(rows=mock_rows))
        repository.pool = pool

        await repository.fetch_all_jokes()

        assert pool.timeouts == [2.5]

    @pytest.mark.asyncio
    async def test_fetch_records_duration_by_outcome(self, repository, metrics, mock_rows):
        repository.pool = FakePool(FakeConnection(rows=mock_rows))
        await repository.fetch_all_jokes()

        repository.pool = FakePool(FakeConnection(error=RuntimeError("boom")))
        with pytest.raises(DatabaseQueryError):
            await repository.fetch_all_jokes()

        registry = metrics.registry
        assert registry.get_sample_value("db_fetch_duration_seconds_count", {"outcome": "success"}) == 1
        assert registry.get_sample_value("db_fetch_duration_seconds_count", {"outcome": "error"}) == 1

    @pytest.mark.asyncio
    async def test_start_creates_bounded_pool(self):
        """Start builds a lazily-connecting pool capped at the configured size."""
        repository = JokesRepository(
            host="db.internal",
            port=5433,
            user="jokes",
            password="secret",
            database="jokes",
            command_timeout=15,
        )
        pool = FakePool()

        with patch(
            'service_jokes.app.persistence.postgres.asyncpg.create_pool',
            new_callable=AsyncMock
        ) as mock_create_pool:
            mock_create_pool.return_value = pool

            await repository.start()

            assert repository.pool is pool
            mock_create_pool.assert_called_once_with(
                None,
                host="db.internal",
                port=5433,
                user="jokes",
                password="secret",
                database="jokes",
                min_size=0,
                max_size=10,
                command_timeout=15
            )

    @pytest.mark.asyncio
    async def test_start_failure_raises_service_exception(self, repository):
        with patch(
            'service_jokes.app.persistence.postgres.asyncpg.create_pool',
            new_callable=AsyncMock
        ) as mock_create_pool:
            mock_create_pool.side_effect = OSError("no route to host")

            with pytest.raises(ServiceException) as exc_info:
                await repository.start()

            assert exc_info.value.code == "POSTGRES_START_FAILED"
            assert repository.pool is None

    @pytest.mark.asyncio
    async def test_stop_closes_pool(self, repository):
        pool = FakePool()
        repository.pool = pool

        await repository.stop()

        assert pool.closed is True
        assert repository.pool is None

    @pytest.mark.asyncio
    async def test_health_check(self, repository):
        assert await repository.health_check() is False

        pool = FakePool()
        repository.pool = pool
        assert await repository.health_check() is True
        assert pool.released == 1

        repository.pool = FakePool(acquire_error=OSError("down"))
        assert await repository.health_check() is False
