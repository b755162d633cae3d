"""
First-run setup shared by the app lifespan and scripts/create_admin.py.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.models import Brand, Role, User
from iqol.services.auth_service import hash_password
from iqol.services.store import TableStore

logger = logging.getLogger(__name__)


async def ensure_first_admin(db: AsyncSession, email: str, password: str, name: str = "Admin") -> Optional[User]:
    """Create an admin only while the profiles table is empty. Returns the new user, if any."""
    if not email or not password:
        return None
    count = (await db.execute(select(func.count()).select_from(User))).scalar() or 0
    if count > 0:
        logger.debug(f"Skipping admin bootstrap, {count} users already exist")
        return None
    admin = await TableStore(db, User).insert({
        "email": email.strip().lower(),
        "password_hash": hash_password(password),
        "name": name,
        "role": Role.ADMIN.value,
        "allowed_brands": [],
        "is_active": True,
    })
    logger.info(f"Bootstrap: created first admin user {admin.email}")
    return admin


async def ensure_brands(db: AsyncSession, names: list[str]) -> list[Brand]:
    """Insert any brand names not already present; returns the newly created brands."""
    wanted = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))
    brands = TableStore(db, Brand)
    existing = {b.name for b in await brands.select(filters={"name": wanted})}
    created = []
    for name in wanted:
        if name in existing:
            continue
        created.append(await brands.insert({"name": name}))
    if created:
        logger.info(f"Bootstrap: added brands {', '.join(b.name for b in created)}")
    return created
