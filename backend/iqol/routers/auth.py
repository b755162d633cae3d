"""
Auth Router: Login and whoami.
"""

import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user
from iqol.database import get_db
from iqol.models import User
from iqol.services.auth_service import authenticate, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ── Schemas ────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class WhoAmIResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    allowed_brands: list[int]
    is_active: bool


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: WhoAmIResponse


def _whoami(user: User) -> WhoAmIResponse:
    return WhoAmIResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        allowed_brands=list(user.allowed_brands or []),
        is_active=user.is_active,
    )


# ── Endpoints ───────────────────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password. Returns JWT."""
    user = await authenticate(db, payload.email, payload.password)
    token = create_access_token(str(user.id))
    return TokenResponse(access_token=token, user=_whoami(user))


@router.get("/whoami", response_model=WhoAmIResponse)
async def whoami(user: User = Depends(get_current_user)):
    """Return current user. Requires JWT auth."""
    return _whoami(user)
