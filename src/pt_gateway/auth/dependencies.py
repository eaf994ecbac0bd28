"""FastAPI dependency: get_current_user.

Usage in any protected router:
    from src.pt_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.database import get_db_session
from src.pt_common.errors import AccountDisabledError, InvalidTokenError
from src.pt_gateway.auth.jwt_handler import decode_access_token
from src.pt_gateway.user.db_models import UserModel

# auto_error=False so a missing header goes through our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises InvalidTokenError (401) if the token is missing, invalid or expired,
    or the user no longer exists. Raises AccountDisabledError (403) if the
    user is disabled.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidTokenError()

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise InvalidTokenError() from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise InvalidTokenError()

    if not user.is_active:
        raise AccountDisabledError()

    return user
