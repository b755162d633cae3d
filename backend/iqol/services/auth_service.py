"""
Auth Service: Password hashing, JWT creation/verification, credential resolution.
"""

import logging
from datetime import datetime, timezone, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from iqol.config import get_settings
from iqol.errors import AuthError
from iqol.models import User
from iqol.utils import parse_subject, utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

# JWT config
ALGORITHM = "HS256"
TOKEN_TYPE = "iqol_session"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed session token. Only the subject is trusted on the way back in."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    ttl = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "exp": now + timedelta(minutes=ttl),
        "iat": now,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload


async def resolve(db: AsyncSession, credential: Optional[str]) -> User:
    """
    Map a session credential to an active User.

    Role and allowed_brands always come from the database row; nothing the
    client asserts about itself is used. Raises AuthError.invalid otherwise.
    """
    if not credential:
        raise AuthError.invalid("Missing authorization")

    payload = decode_access_token(credential)
    if not payload:
        raise AuthError.invalid()

    user_id = parse_subject(payload["sub"])
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthError.invalid("User not found")
    if not user.is_active:
        raise AuthError.invalid("Account is disabled")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check email/password and stamp last_login_at. Same message for every failure."""
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login for {email.strip().lower()}")
        raise AuthError.invalid("Invalid email or password")
    if not user.is_active:
        logger.warning(f"Login attempt on disabled account {user.email}")
        raise AuthError.invalid("Account is disabled")

    user.last_login_at = utcnow()
    await db.flush()
    logger.info(f"User {user.email} logged in")
    return user
