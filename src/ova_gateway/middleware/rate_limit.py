"""Login rate limiting: Redis fixed window per client IP.

Key pattern: "ratelimit:login:{ip}:{window}" where window is the current
minute. INCR then EXPIRE on the first hit; over the limit raises
RateLimitError (9001, HTTP 429).
"""

import time

from fastapi import Request

from config.settings import settings
from src.ova_common.errors import RateLimitError
from src.ova_common.redis_client import get_redis

_WINDOW_SECONDS = 60


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def login_rate_limit(request: Request) -> None:
    """FastAPI dependency guarding POST /auth/login."""
    redis = await get_redis()
    window = int(time.time()) // _WINDOW_SECONDS
    key = f"ratelimit:login:{client_ip(request)}:{window}"
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, _WINDOW_SECONDS)
    if count > settings.LOGIN_RATE_LIMIT_PER_MINUTE:
        raise RateLimitError()
