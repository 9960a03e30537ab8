"""
Jokes service: cached, read-only jokes list over HTTP.
"""

import os
from typing import Optional

from fastapi.responses import FileResponse, JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ServiceException, JokesUnavailableError

from .cache.jokes_cache import JokesCache
from .persistence.postgres import JokesRepository
from .provider import JokesFetcher, JokesProvider


SERVER_ERROR_BODY = {
    "error": "Server error",
    "message": "Please try again later"
}


class JokesService(BaseService):
    """Jokes service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        repository: Optional[JokesFetcher] = None,
        cache: Optional[JokesCache] = None,
    ):
        super().__init__("jokes", config)

        self.repository = repository or JokesRepository(
            host=self.config.db_host,
            port=self.config.db_port,
            user=self.config.db_user,
            password=self.config.db_password,
            database=self.config.db_name,
            pool_size=self.config.db_pool_size,
            acquire_timeout=self.config.db_acquire_timeout,
            command_timeout=self.config.db_command_timeout,
            metrics=self.metrics,
        )
        self.cache = cache or JokesCache(self.config.cache_duration_seconds)
        self.provider = JokesProvider(
            self.cache,
            self.repository,
            metrics=self.metrics,
            single_flight=self.config.single_flight,
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_jokes_routes()
        self._setup_frontend_routes()

    def _setup_jokes_routes(self):
        """Set up jokes-specific routes."""

        @self.app.get("/post")
        async def get_jokes():
            """Return every joke, from cache when fresh."""
            try:
                return await self.provider.get_jokes()
            except JokesUnavailableError:
                return JSONResponse(status_code=500, content=SERVER_ERROR_BODY)

        @self.app.get("/post/stats")
        async def get_cache_stats():
            """Get jokes cache statistics."""
            return self.cache.stats()

    def _setup_frontend_routes(self):
        """Serve the built front-end, falling back to its index page."""
        static_root = os.path.realpath(self.config.static_dir)

        @self.app.get("/{full_path:path}", include_in_schema=False)
        async def frontend(full_path: str):
            candidate = os.path.realpath(os.path.join(static_root, full_path))
            inside_root = os.path.commonpath([static_root, candidate]) == static_root
            if full_path and inside_root and os.path.isfile(candidate):
                return FileResponse(candidate)

            index_path = os.path.join(static_root, "index.html")
            if os.path.isfile(index_path):
                return FileResponse(index_path)

            return JSONResponse(status_code=404, content={"detail": "Not Found"})

    async def _check_dependencies(self):
        """Check jokes service dependencies."""
        dependencies = {}

        try:
            if await self.repository.health_check():
                dependencies["postgres"] = "ok"
            else:
                dependencies["postgres"] = "error"
        except Exception:
            dependencies["postgres"] = "error"

        return dependencies

    async def start(self):
        """Start jokes service components."""
        start = getattr(self.repository, "start", None)
        if start is None:
            return
        try:
            await start()
        except ServiceException as e:
            # Requests keep working through the cold-failure path until the store is reachable
            self.logger.error("Jokes service started without a database pool", code=e.code, error=e.message)
            return

        self.logger.info("Jokes service started", port=self.port)

    async def stop(self):
        """Stop jokes service components."""
        stop = getattr(self.repository, "stop", None)
        if stop is not None:
            await stop()

        self.logger.info("Jokes service stopped")


def create_app(config: Optional[ServiceConfig] = None):
    """Create jokes service application."""
    service = JokesService(config)
    return service.app


if __name__ == "__main__":
    service = JokesService()
    service.run()
