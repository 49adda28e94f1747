"""Redis-backed distributed locks.

Two kinds of work must not overlap across API workers:
- report imports, one per report type ("import:<type>", 10 min TTL)
- the mailbox scan ("email-fetch", 30 min TTL)

Nothing else lives in Redis; dashboard views always recompute from Postgres.
When Redis is down or unconfigured the ``try_*`` helpers let callers run
unlocked instead of failing the request.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from opsboard.settings import get_settings

TTL_IMPORT_LOCK = 600
TTL_EMAIL_FETCH_LOCK = 1800

LOCK_NAMESPACE = "lock:"

_client: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


def _lock_key(key: str) -> str:
    return f"{LOCK_NAMESPACE}{key}"


async def init_redis() -> None:
    """Connect and ping, so a bad REDIS_URL shows up at startup."""
    global _client
    client = redis.from_url(
        get_settings().redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await client.ping()
    _client = client
    logger.info("Redis connected")


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def _get_redis() -> redis.Redis:
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client


async def acquire_lock(key: str, ttl: int = TTL_IMPORT_LOCK) -> bool:
    """Take ``key`` for ``ttl`` seconds; False when someone else holds it."""
    taken = await _get_redis().set(_lock_key(key), "1", nx=True, ex=ttl)
    return bool(taken)


async def release_lock(key: str) -> None:
    await _get_redis().delete(_lock_key(key))


async def try_acquire_lock(key: str, ttl: int = TTL_IMPORT_LOCK) -> bool | None:
    """Like acquire_lock, but None (proceed unlocked) when Redis is absent or failing."""
    if _client is None:
        return None
    try:
        return await acquire_lock(key, ttl=ttl)
    except RedisError as e:
        logger.warning("Redis lock %s unavailable, running unlocked: %s", key, e)
        return None


async def try_release_lock(key: str) -> None:
    if _client is None:
        return
    try:
        await release_lock(key)
    except RedisError as e:
        # the TTL frees it eventually
        logger.warning("Redis lock %s not released: %s", key, e)
