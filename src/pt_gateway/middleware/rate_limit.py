"""API rate limiting middleware.

Fixed-window counter per client IP in Redis:
    count = INCR ratelimit:{ip}:api
    EXPIRE on first hit (API_RATE_WINDOW_SECONDS)
    count > API_RATE_LIMIT  →  429 + Retry-After

Exempt: /health (probes) and the Stripe webhook (provider retries must
never be throttled). If Redis is unreachable the request is let through and
a warning is logged; rate limiting must not take the API down.
"""

import logging

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.pt_common.errors import RateLimitError
from src.pt_common.redis_client import get_redis
from src.pt_common.response import error_response

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/api/payments/webhook"})


def client_ip(request: Request) -> str:
    """Real client IP, reverse-proxy aware (first X-Forwarded-For hop)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = f"ratelimit:{client_ip(request)}:api"
        try:
            redis = await get_redis()
            count = int(await redis.incr(key))
            if count == 1:
                await redis.expire(key, settings.API_RATE_WINDOW_SECONDS)
            if count > settings.API_RATE_LIMIT:
                ttl = await redis.ttl(key)
                return _too_many_requests(max(int(ttl), 1))
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)

        return await call_next(request)


def _too_many_requests(retry_after: int) -> JSONResponse:
    exc = RateLimitError(retry_after)
    body = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=body.model_dump(),
        headers=exc.headers,
    )
