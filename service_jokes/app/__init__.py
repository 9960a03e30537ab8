"""
Jokes Service package.

Serves the jokes collection over HTTP behind a short-lived in-process cache:

- app.main: API surface for the jokes list, cache stats and health.
- app.provider: Cache-aside orchestration with stale-on-error fallback.
- app.cache: Single-slot in-process cache of the last good result set.
- app.persistence: PostgreSQL access through a bounded connection pool.

Guidelines:
- The endpoint is read-only; the cache is only refilled by a successful fetch.
- A failed fetch is masked by any previously cached data, however old.
"""
