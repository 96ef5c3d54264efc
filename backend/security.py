"""Password hashing (bcrypt) and bearer tokens (JWT, HS256)."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

import bcrypt
import jwt

from config_env import BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_SECRET, TOKEN_TTL_DAYS
from domain.access import Role, SessionContext
from domain.errors import Unauthorized

logger = logging.getLogger(__name__)

# Compared against when the email is unknown so both login failures cost one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    try:
        if not password_hash:
            bcrypt.checkpw(password.encode(), _DUMMY_HASH.encode())
            return False
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(
    account_id: str,
    role: str,
    ttl: Optional[dt.timedelta] = None,
    secret: str = JWT_SECRET,
) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": account_id,
        "role": Role(role).value,
        "iat": now,
        "exp": now + (ttl if ttl is not None else dt.timedelta(days=TOKEN_TTL_DAYS)),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str = JWT_SECRET) -> SessionContext:
    """Verify signature and expiry; return identity + role from the claims."""
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.PyJWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise Unauthorized("Invalid token")

    try:
        role = Role(payload["role"])
    except ValueError:
        raise Unauthorized("Invalid token")
    return SessionContext(account_id=str(payload["sub"]), role=role)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None
