import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recordstore.core.config import settings
from recordstore.core.exceptions import ForbiddenError, UnauthorizedError
from recordstore.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "record-store-backend"

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or oversized password
        return False


def create_access_token(user_id: int, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "sub": str(user_id),
        "user_id": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": expire,
        "iss": TOKEN_ISSUER,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            issuer=TOKEN_ISSUER,
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise UnauthorizedError("Invalid or expired token")

    try:
        return CurrentUser(
            user_id=payload["user_id"],
            username=payload["username"],
            role=payload["role"],
        )
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Resolve the principal from the ``Authorization: Bearer <token>`` header.
    The token is trusted as-is; the user row is not re-read.
    """
    if credentials is None:
        raise UnauthorizedError("Missing authorization header")
    if credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Invalid authorization header format")
    return decode_access_token(credentials.credentials)


async def get_current_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise ForbiddenError()
    return current_user
