"""bcrypt password hashing (cost 12).

bcrypt only looks at the first 72 bytes of its input and bcrypt>=5 raises
on anything longer, so both functions hash the same 72-byte prefix. The
registration schema caps passwords at 128 characters, which multi-byte
characters can push past that limit.
"""

import bcrypt

BCRYPT_ROUNDS = 12
_MAX_BYTES = 72


def _secret(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_BYTES]


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(_secret(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(plain), hashed.encode("ascii"))
    except ValueError:
        # Malformed stored hash
        return False
