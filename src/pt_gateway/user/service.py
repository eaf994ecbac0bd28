"""User domain service: register, login (with lockout), profile.

Register runs inside the router's ``async with db.begin()`` so the users and
accounts rows commit together. Login commits its own counter updates because
a failed attempt must be recorded even though the request then fails.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pt_account.domain.repository import AccountRepositoryProtocol
from src.pt_account.infrastructure.persistence import AccountRepository
from src.pt_common.datetime_utils import minutes_until, utc_now
from src.pt_common.errors import (
    AccountDisabledError,
    AccountLockedError,
    AccountNotFoundError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.pt_common.redis_client import get_redis
from src.pt_gateway.auth.jwt_handler import create_access_token
from src.pt_gateway.auth.login_throttle import LoginThrottle
from src.pt_gateway.auth.password import hash_password, verify_password
from src.pt_gateway.user.db_models import UserModel
from src.pt_gateway.user.schemas import MeResponse, RegisterRequest

logger = logging.getLogger(__name__)


async def _redis_throttle() -> LoginThrottle:
    return LoginThrottle(await get_redis())


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(
        self,
        accounts: AccountRepositoryProtocol | None = None,
        throttle_factory: Callable[[], Awaitable[LoginThrottle]] = _redis_throttle,
        max_attempts: int = settings.MAX_LOGIN_ATTEMPTS,
        lockout: timedelta = timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES),
    ) -> None:
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._throttle_factory = throttle_factory
        self._max_attempts = max_attempts
        self._lockout = lockout

    async def register(
        self, body: RegisterRequest, db: AsyncSession
    ) -> tuple[UserModel, str]:
        """Create the user and its zero-balance account; return (user, token)."""
        email = body.email.lower()
        result = await db.execute(
            select(UserModel).where(
                or_(
                    func.lower(UserModel.username) == body.username.lower(),
                    UserModel.email == email,
                )
            )
        )
        existing = result.scalars().first()
        if existing is not None:
            if existing.email == email:
                raise EmailExistsError()
            raise UsernameExistsError()

        user = UserModel(
            username=body.username,
            email=email,
            first_name=body.first_name,
            last_name=body.last_name,
            date_of_birth=body.date_of_birth,
            password_hash=hash_password(body.password),
            is_active=True,
            failed_login_attempts=0,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing

        await self._accounts.create_account(db, str(user.id))
        logger.info("User registered: %s (%s)", user.id, user.username)
        return user, create_access_token(str(user.id))

    async def login(
        self, email: str, password: str, client_ip: str, db: AsyncSession
    ) -> tuple[UserModel, str]:
        """Authenticate and return (user, access_token).

        Unknown email and wrong password both raise InvalidCredentialsError
        so the response does not reveal which accounts exist.
        """
        throttle = await self._throttle_factory()
        await throttle.ensure_not_locked(client_ip)

        result = await db.execute(select(UserModel).where(UserModel.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            await throttle.register_failure(client_ip)
            raise InvalidCredentialsError()

        now = utc_now()
        if user.account_locked_until is not None and user.account_locked_until > now:
            raise AccountLockedError(minutes_until(user.account_locked_until, now))

        if not verify_password(password, user.password_hash):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
            if user.failed_login_attempts >= self._max_attempts:
                user.account_locked_until = now + self._lockout
                user.failed_login_attempts = 0
                logger.warning("Account %s locked until %s", user.id, user.account_locked_until)
            await db.commit()
            await throttle.register_failure(client_ip)
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user.failed_login_attempts = 0
        user.account_locked_until = None
        user.last_login = now
        await db.commit()
        await throttle.reset(client_ip)

        return user, create_access_token(str(user.id))

    async def me(self, user: UserModel, db: AsyncSession) -> MeResponse:
        account = await self._accounts.get_account_by_user_id(db, str(user.id))
        if account is None:
            raise AccountNotFoundError(str(user.id))
        return MeResponse(
            id=str(user.id),
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            date_of_birth=user.date_of_birth,
            balance=account.balance,
            created_at=user.created_at.isoformat() if user.created_at else "",
            last_login=user.last_login.isoformat() if user.last_login else None,
        )
