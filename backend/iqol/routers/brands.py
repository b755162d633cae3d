"""
Brands Router: Brand list scoped to the caller; admins may add brands.
"""

import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user, require_admin
from iqol.database import get_db
from iqol.errors import ValidationError
from iqol.models import Brand, User
from iqol.services.access_policy import scope, scope_filter
from iqol.services.store import TableStore, safe_select
from iqol.utils import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brands", tags=["Brands"])


class BrandResponse(BaseModel):
    id: int
    name: str


class BrandCreateRequest(BaseModel):
    name: str


async def visible_brands(db: AsyncSession, user: User) -> list[Brand]:
    """Brands the user may read, ordered by id."""
    allowed = scope_filter(user)
    filters = {"id": allowed} if allowed is not None else None
    brands = await safe_select(TableStore(db, Brand), filters=filters, order_by=["id"])
    return scope(user, brands, brand_field="id")


@router.get("", response_model=list[BrandResponse])
async def list_brands(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [BrandResponse(id=b.id, name=b.name) for b in await visible_brands(db, user)]


@router.post("", response_model=BrandResponse)
async def create_brand(
    payload: BrandCreateRequest,
    current: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a brand. Admin only."""
    name = require_text(payload.name, "Brand name is required.")
    brands = TableStore(db, Brand)
    if await brands.select(filters={"name": name}):
        raise ValidationError("A brand with that name already exists")
    brand = await brands.insert({"name": name})
    logger.info(f"Admin {current.email} created brand {brand.name} ({brand.id})")
    return BrandResponse(id=brand.id, name=brand.name)
