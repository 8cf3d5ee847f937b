"""Shared redis.asyncio client.

Only the login rate limiter keeps state here; bet totals, limits and phase
counters always come from PostgreSQL.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Lazily create the client; the connection pool lives inside it."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


async def ping_redis() -> bool:
    return bool(await (await get_redis()).ping())


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
