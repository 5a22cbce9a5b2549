"""
Password hashing, access tokens and the request dependencies that inject the
caller's identity.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from canteen.core import config
from canteen.core.errors import ConfigurationError, NotAuthenticated, PermissionDenied
from canteen.models.employee import Role

log = logging.getLogger(__name__)

_hasher = PasswordHasher()
_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    employee_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ----------- Passwords -----------

async def hash_password(password: str) -> str:
    # Argon2 is CPU bound; keep it off the event loop
    return await run_in_threadpool(_hasher.hash, password)


async def verify_password(password_hash: str, password: str) -> bool:
    try:
        return await run_in_threadpool(_hasher.verify, password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


# ----------- Tokens -----------

def _secret() -> str:
    if not config.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET is not set")
    return config.JWT_SECRET


def create_access_token(employee_id: str, role: Role, ttl: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": employee_id,
        "role": role.value,
        "iat": now,
        "exp": now + (ttl or timedelta(days=config.ACCESS_TOKEN_TTL_DAYS)),
    }
    return jwt.encode(payload, _secret(), algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        claims = jwt.decode(token, _secret(), algorithms=[config.JWT_ALGORITHM], options={"require": ["sub", "exp"]})
        return Identity(employee_id=claims["sub"], role=Role(claims.get("role", Role.EMPLOYEE.value)))
    except jwt.ExpiredSignatureError as e:
        raise NotAuthenticated("Token expired") from e
    except (jwt.InvalidTokenError, ValueError) as e:
        log.info(f"Rejected access token: {e}")
        raise NotAuthenticated("Invalid token") from e


# ----------- Dependencies -----------

async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Identity:
    """Resolves the caller from the `Authorization: Bearer <token>` header."""
    if credentials is None:
        raise NotAuthenticated("Missing bearer token")
    return decode_access_token(credentials.credentials)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise PermissionDenied("Administrator access required")
    return identity
