"""JWT token creation and verification.

HS256 (symmetric HMAC) with one shared JWT_SECRET. Tokens carry a ``type``
claim so a token minted for another purpose can never pass as an access
token.

No revocation: a token is valid until expiry (JWT_EXPIRE_MINUTES, 7 days by
default, matching the web client's session length).
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pt_common.errors import InvalidTokenError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_ACCESS_TYPE = "access"


def create_access_token(user_id: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": _ACCESS_TYPE,
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def access_token_ttl_seconds() -> int:
    return int(_ACCESS_EXPIRE.total_seconds())


def decode_access_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: signature/expiry check failed, wrong ``type`` or
            missing ``sub``.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidTokenError() from None

    if payload.get("type") != _ACCESS_TYPE or not payload.get("sub"):
        raise InvalidTokenError()

    return payload
