"""
Authentication & Authorization dependencies.

Every data route requires a server-issued JWT: Authorization: Bearer <jwt>.
The user's role and allowed brands are loaded from the database on each
request; nothing the client says about itself is trusted.
"""

import logging
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.database import get_db
from iqol.errors import AuthError
from iqol.models import User
from iqol.services.auth_service import resolve

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a valid session token and return the active User behind it."""
    token = credentials.credentials if credentials else None
    return await resolve(db, token)


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Require current user to be admin."""
    if not user.is_admin:
        logger.warning(f"Non-admin {user.id} attempted an admin operation")
        raise AuthError.forbidden("Admin access required")
    return user
