"""Data stores for persistence and locking.

Stores handle:
- PostgreSQL: DB session, aggregate reads, batched upserts
- Redis: distributed locks, TTL policies

No business/classification logic in stores - that belongs in services.
"""
