"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, stock record store, rule source
- Redis: caching with TTL policies

No business rules in stores - legality checks and pricing belong in services.
"""
