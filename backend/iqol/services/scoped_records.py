"""
Brand-scoped reads and writes shared by the metrics, blogs and social-post routers.
Every brand-owned table goes through these so no route can skip the policy.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from iqol.errors import NotFoundError, ValidationError
from iqol.models import Brand
from iqol.services.access_policy import AccessMode, require_brand_access, scope, scope_filter
from iqol.services.store import TableStore, safe_select

logger = logging.getLogger(__name__)


async def list_scoped(
    db: AsyncSession,
    user,
    model,
    order_by: Sequence[str],
    limit: Optional[int] = None,
    brand_id: Optional[int] = None,
    filters: Optional[dict] = None,
) -> list:
    """
    Rows of ``model`` the user may read. The brand restriction is pushed into
    the query and re-checked on the result.
    """
    allowed = scope_filter(user, [brand_id] if brand_id is not None else None)
    filters = dict(filters or {})
    if allowed is not None:
        filters["brand_id"] = allowed
    rows = await safe_select(TableStore(db, model), filters=filters or None, order_by=order_by, limit=limit)
    return scope(user, rows)


async def check_brand(db: AsyncSession, user, brand_id: Optional[int]) -> int:
    """Brand must be selected, must exist and must be writable by the user."""
    if not brand_id:
        raise ValidationError("Please select a brand.")
    require_brand_access(user, brand_id, AccessMode.WRITE)
    if await TableStore(db, Brand).get(brand_id) is None:
        raise ValidationError(f"Unknown brand id: {brand_id}")
    return brand_id


async def load_for_write(db: AsyncSession, user, model, record_id: int, label: str):
    """Fetch a row and confirm the user may write to the brand that owns it."""
    row = await TableStore(db, model).get(record_id)
    if row is None:
        raise NotFoundError(f"{label} not found")
    require_brand_access(user, row.brand_id, AccessMode.WRITE)
    return row


async def create_scoped(db: AsyncSession, user, model, values: dict):
    values["brand_id"] = await check_brand(db, user, values.get("brand_id"))
    return await TableStore(db, model).insert(values)


async def update_scoped(db: AsyncSession, user, model, record_id: int, values: dict, label: str):
    """Both the current owner brand and the requested brand must be writable."""
    await load_for_write(db, user, model, record_id, label)
    values["brand_id"] = await check_brand(db, user, values.get("brand_id"))
    return await TableStore(db, model).update(record_id, values)


async def delete_scoped(db: AsyncSession, user, model, record_id: int, label: str) -> None:
    await load_for_write(db, user, model, record_id, label)
    await TableStore(db, model).delete(record_id)
    logger.info(f"User {user.id} deleted {model.__tablename__} {record_id}")
