"""Rate limit and security header middleware on a throwaway app."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.pt_gateway.middleware.rate_limit import RateLimitMiddleware
from src.pt_gateway.middleware.security_headers import SECURITY_HEADERS, SecurityHeadersMiddleware


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/api/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


@pytest.fixture
def redis() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
async def client(redis: AsyncMock) -> AsyncClient:
    with patch(
        "src.pt_gateway.middleware.rate_limit.get_redis", new=AsyncMock(return_value=redis)
    ):
        transport = ASGITransport(app=_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def test_under_limit_passes(client: AsyncClient, redis: AsyncMock) -> None:
    redis.incr.return_value = 1

    resp = await client.get("/api/ping", headers={"X-Forwarded-For": "9.9.9.9, 10.0.0.1"})

    assert resp.status_code == 200
    redis.incr.assert_awaited_once_with("ratelimit:9.9.9.9:api")
    redis.expire.assert_awaited_once()


async def test_over_limit_returns_429(client: AsyncClient, redis: AsyncMock) -> None:
    redis.incr.return_value = 10_000
    redis.ttl.return_value = 120

    resp = await client.get("/api/ping")

    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "120"
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == 9001


async def test_health_is_exempt(client: AsyncClient, redis: AsyncMock) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    redis.incr.assert_not_awaited()


async def test_redis_down_fails_open(client: AsyncClient, redis: AsyncMock) -> None:
    redis.incr.side_effect = RedisConnectionError("refused")

    resp = await client.get("/api/ping")

    assert resp.status_code == 200


async def test_security_headers(client: AsyncClient, redis: AsyncMock) -> None:
    redis.incr.return_value = 1
    resp = await client.get("/api/ping")
    for name, value in SECURITY_HEADERS.items():
        assert resp.headers[name] == value
