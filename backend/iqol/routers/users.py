"""
Users Router: User management with per-brand access (admin only).
"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import require_admin
from iqol.database import get_db
from iqol.errors import NotFoundError, ValidationError
from iqol.models import ActionItem, Brand, Role, User
from iqol.services.auth_service import hash_password
from iqol.services.store import TableStore
from iqol.utils import parse_uuid, require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


# ── Schemas ────────────────────────────────────────────────────────────

class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    allowed_brands: list[int]
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime


class UserCreateRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: str = Role.USER.value
    allowed_brands: list[int] = []


class UserUpdateRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None  # Blank/None keeps the current password
    role: str | None = None
    allowed_brands: list[int] | None = None
    is_active: bool | None = None


def _to_response(u: User) -> UserResponse:
    return UserResponse(
        id=str(u.id),
        name=u.name,
        email=u.email,
        role=u.role,
        allowed_brands=list(u.allowed_brands or []),
        is_active=u.is_active,
        last_login_at=u.last_login_at,
        created_at=u.created_at,
    )


# ── Helpers ───────────────────────────────────────────────────────────

def _check_role(role: str) -> str:
    if role not in (Role.ADMIN.value, Role.USER.value):
        raise ValidationError(f"Role must be 'admin' or 'user', got {role!r}")
    return role


async def _check_brands(db: AsyncSession, brand_ids: list[int]) -> list[int]:
    """Dedupe and confirm every brand id exists."""
    wanted = sorted(set(brand_ids))
    if not wanted:
        return []
    found = await TableStore(db, Brand).select(filters={"id": wanted})
    missing = set(wanted) - {b.id for b in found}
    if missing:
        raise ValidationError(f"Unknown brand ids: {sorted(missing)}")
    return wanted


async def _check_unique(db: AsyncSession, *, name: str | None = None, email: str | None = None, exclude=None):
    users = TableStore(db, User)
    if name is not None:
        clash = [u for u in await users.select(filters={"name": name}) if u.id != exclude]
        if clash:
            raise ValidationError("A user with that name already exists")
    if email is not None:
        clash = [u for u in await users.select(filters={"email": email}) if u.id != exclude]
        if clash:
            raise ValidationError("Email already registered")


async def _move_action_items(db: AsyncSession, from_name: str, to_name: str) -> None:
    """Action items are keyed by assignee name; keep them with their owner."""
    moved = await TableStore(db, ActionItem).update_where({"assigned_to": from_name}, {"assigned_to": to_name})
    if moved:
        logger.info(f"Moved {moved} action items from {from_name!r} to {to_name!r}")


# ── Endpoints ───────────────────────────────────────────────────────────

@router.get("", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List all users ordered by name. Admin only."""
    users = await TableStore(db, User).select(order_by=["name"])
    return [_to_response(u) for u in users]


@router.post("", response_model=UserResponse)
async def create_user(
    payload: UserCreateRequest,
    current: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a user directly. Admin only."""
    name = require_text(payload.name, "Name is required.")
    if not payload.password:
        raise ValidationError("Password is required.")
    email = payload.email.lower()
    await _check_unique(db, name=name, email=email)

    user = await TableStore(db, User).insert({
        "name": name,
        "email": email,
        "password_hash": hash_password(payload.password),
        "role": _check_role(payload.role),
        "allowed_brands": await _check_brands(db, payload.allowed_brands),
        "is_active": True,
    })
    logger.info(f"Admin {current.email} created user {user.email} ({user.role})")
    return _to_response(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    current: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update user. Admin only."""
    uid = parse_uuid(user_id, "user_id")
    users = TableStore(db, User)
    existing = await users.get(uid)
    if existing is None:
        raise NotFoundError("User not found")
    old_name = existing.name

    partial = {}
    if payload.name is not None:
        partial["name"] = require_text(payload.name, "Name is required.")
        await _check_unique(db, name=partial["name"], exclude=uid)
    if payload.email is not None:
        partial["email"] = payload.email.lower()
        await _check_unique(db, email=partial["email"], exclude=uid)
    if payload.password:
        partial["password_hash"] = hash_password(payload.password)
    if payload.role is not None:
        partial["role"] = _check_role(payload.role)
    if payload.allowed_brands is not None:
        partial["allowed_brands"] = await _check_brands(db, payload.allowed_brands)
    if payload.is_active is not None:
        partial["is_active"] = payload.is_active

    user = await users.update(uid, partial)
    if user.name != old_name:
        await _move_action_items(db, old_name, user.name)
    logger.info(f"Admin {current.email} updated user {user.email}: {sorted(k for k in partial if k != 'password_hash')}")
    return _to_response(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    reassign_to: str | None = Query(None),
    current: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete user. Admin only. Cannot delete self.

    Action items are owned by name, so a user who still has some can only be
    deleted with ?reassign_to=<name> of another user.
    """
    uid = parse_uuid(user_id, "user_id")
    if current.id == uid:
        raise ValidationError("Cannot delete your own account")

    users = TableStore(db, User)
    user = await users.get(uid)
    if user is None:
        raise NotFoundError("User not found")

    open_items = await TableStore(db, ActionItem).select(filters={"assigned_to": user.name})
    if open_items:
        if not reassign_to:
            raise ValidationError(
                f"{user.name} still has {len(open_items)} action items. "
                "Reassign them (reassign_to) or delete them first."
            )
        target = (await users.select(filters={"name": reassign_to.strip()}, limit=1) or [None])[0]
        if target is None or target.id == uid:
            raise ValidationError(f"No other user named {reassign_to!r}")
        await _move_action_items(db, user.name, target.name)

    await users.delete(uid)
    logger.info(f"Admin {current.email} deleted user {uid}")
    return {"ok": True}
