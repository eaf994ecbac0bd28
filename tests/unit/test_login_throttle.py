"""Unit tests for the Redis-backed per-address login throttle."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.pt_common.errors import RateLimitError
from src.pt_gateway.auth.login_throttle import LoginThrottle


@pytest.fixture
def redis() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def throttle(redis: AsyncMock) -> LoginThrottle:
    return LoginThrottle(redis, max_attempts=3, lockout_seconds=900)


class TestEnsureNotLocked:
    async def test_no_lock(self, throttle: LoginThrottle, redis: AsyncMock) -> None:
        redis.ttl.return_value = -2
        await throttle.ensure_not_locked("1.2.3.4")
        redis.ttl.assert_awaited_once_with("login:lock:1.2.3.4")

    async def test_locked_raises_with_minutes(
        self, throttle: LoginThrottle, redis: AsyncMock
    ) -> None:
        redis.ttl.return_value = 61

        with pytest.raises(RateLimitError) as exc_info:
            await throttle.ensure_not_locked("1.2.3.4")

        assert "2 minute(s)" in exc_info.value.message
        assert exc_info.value.headers == {"Retry-After": "61"}


class TestRegisterFailure:
    async def test_first_failure_sets_window(
        self, throttle: LoginThrottle, redis: AsyncMock
    ) -> None:
        redis.incr.return_value = 1

        assert await throttle.register_failure("1.2.3.4") == 1

        redis.expire.assert_awaited_once_with("login:fail:1.2.3.4", 900)
        redis.set.assert_not_awaited()

    async def test_limit_sets_lock_and_clears_counter(
        self, throttle: LoginThrottle, redis: AsyncMock
    ) -> None:
        redis.incr.return_value = 3

        await throttle.register_failure("1.2.3.4")

        redis.expire.assert_not_awaited()
        redis.set.assert_awaited_once_with("login:lock:1.2.3.4", "1", ex=900)
        redis.delete.assert_awaited_once_with("login:fail:1.2.3.4")


async def test_reset_clears_both_keys(throttle: LoginThrottle, redis: AsyncMock) -> None:
    await throttle.reset("1.2.3.4")
    redis.delete.assert_awaited_once_with("login:fail:1.2.3.4", "login:lock:1.2.3.4")


class TestRedisUnavailable:
    async def test_lock_check_lets_login_through(
        self, throttle: LoginThrottle, redis: AsyncMock
    ) -> None:
        redis.ttl.side_effect = RedisConnectionError("down")
        await throttle.ensure_not_locked("1.2.3.4")

    async def test_failure_is_not_counted(
        self, throttle: LoginThrottle, redis: AsyncMock
    ) -> None:
        redis.incr.side_effect = RedisConnectionError("down")
        assert await throttle.register_failure("1.2.3.4") == 0
        redis.set.assert_not_awaited()

    async def test_reset_does_not_raise(self, throttle: LoginThrottle, redis: AsyncMock) -> None:
        redis.delete.side_effect = RedisConnectionError("down")
        await throttle.reset("1.2.3.4")
