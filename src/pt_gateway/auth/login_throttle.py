"""Per-source-address login throttle backed by Redis.

Fixed-window counting with TTL expiry so every API instance sees the same
state and nothing leaks after a restart:

    login:fail:{ip}  INCR, EXPIRE lockout window on first failure
    login:lock:{ip}  SET with EX=lockout once the counter reaches the limit

Per-account lockout lives on the users row (see UserService.login). When
Redis is unreachable the throttle logs a warning and lets logins through;
the per-account lockout still applies.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings
from src.pt_common.errors import RateLimitError

logger = logging.getLogger(__name__)


class LoginThrottle:
    def __init__(
        self,
        redis: aioredis.Redis,
        max_attempts: int = settings.MAX_LOGIN_ATTEMPTS,
        lockout_seconds: int = settings.LOGIN_LOCKOUT_MINUTES * 60,
    ) -> None:
        self._redis = redis
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout_seconds

    @staticmethod
    def _fail_key(ip: str) -> str:
        return f"login:fail:{ip}"

    @staticmethod
    def _lock_key(ip: str) -> str:
        return f"login:lock:{ip}"

    async def ensure_not_locked(self, ip: str) -> None:
        """Raise RateLimitError while the address is locked out."""
        try:
            ttl = await self._redis.ttl(self._lock_key(ip))
        except RedisError as exc:
            logger.warning("Login throttle unavailable, skipping lock check: %s", exc)
            return
        if ttl and ttl > 0:
            minutes = max(1, -(-ttl // 60))
            raise RateLimitError(
                retry_after=ttl,
                message=(
                    "Too many failed login attempts. "
                    f"Please try again in {minutes} minute(s)"
                ),
            )

    async def register_failure(self, ip: str) -> int:
        """Count one failed attempt; lock the address once the limit is hit.

        Returns the attempt count, or 0 when Redis is unreachable.
        """
        key = self._fail_key(ip)
        try:
            count = int(await self._redis.incr(key))
            if count == 1:
                await self._redis.expire(key, self._lockout_seconds)
            if count >= self._max_attempts:
                await self._redis.set(self._lock_key(ip), "1", ex=self._lockout_seconds)
                await self._redis.delete(key)
                logger.warning("Login locked for address %s after %d failures", ip, count)
        except RedisError as exc:
            logger.warning("Login throttle unavailable, failure not counted: %s", exc)
            return 0
        return count

    async def reset(self, ip: str) -> None:
        try:
            await self._redis.delete(self._fail_key(ip), self._lock_key(ip))
        except RedisError as exc:
            logger.warning("Login throttle unavailable, counters not reset: %s", exc)
