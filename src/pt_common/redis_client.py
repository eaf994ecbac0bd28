"""Shared Redis connection.

Holds only throwaway counters: the API rate-limit window and the per-address
login throttle. Balances, positions and deposit idempotency live in
PostgreSQL so they commit together with the money movement.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
    return _client


async def ping_redis() -> None:
    """Raises if Redis is unreachable; called once at startup."""
    client = await get_redis()
    await client.ping()


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
