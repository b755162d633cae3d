import pytest

from conftest import make_user
from iqol.models import Brand
from iqol.services.auth_service import verify_password
from iqol.services.bootstrap import ensure_brands, ensure_first_admin


@pytest.mark.anyio
async def test_first_admin_created_on_empty_database(session_maker):
    async with session_maker() as db:
        admin = await ensure_first_admin(db, "Ops@IQOL.in", "s3cret-pass", "Ops")
        await db.commit()
    assert admin.email == "ops@iqol.in"
    assert admin.role == "admin"
    assert verify_password("s3cret-pass", admin.password_hash)


@pytest.mark.anyio
async def test_first_admin_skipped_when_users_exist(session_maker, seed):
    await seed(make_user("Asha"))
    async with session_maker() as db:
        assert await ensure_first_admin(db, "ops@iqol.in", "s3cret-pass") is None


@pytest.mark.anyio
async def test_first_admin_needs_credentials(session_maker):
    async with session_maker() as db:
        assert await ensure_first_admin(db, "", "s3cret-pass") is None


@pytest.mark.anyio
async def test_ensure_brands_only_adds_missing(session_maker, seed):
    await seed(Brand(name="TruEstate"))
    async with session_maker() as db:
        created = await ensure_brands(db, ["TruEstate", " ACN ", "ACN", ""])
        await db.commit()
    assert [b.name for b in created] == ["ACN"]
