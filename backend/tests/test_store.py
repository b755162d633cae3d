"""
Tests for TableStore CRUD and read degradation.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from iqol.errors import PersistenceError
from iqol.models import ActionItem, Blog, Brand, DailyMetric
from iqol.services.store import TableStore, safe_select


@pytest.mark.anyio
async def test_insert_select_update_delete(session_maker):
    async with session_maker() as db:
        brands = TableStore(db, Brand)
        a = await brands.insert({"name": "TruEstate"})
        b = await brands.insert({"name": "ACN"})
        c = await brands.insert({"name": "Canvas Homes"})

        assert [x.name for x in await brands.select(order_by=["-id"])] == ["Canvas Homes", "ACN", "TruEstate"]
        assert {x.id for x in await brands.select(filters={"id": [a.id, c.id]})} == {a.id, c.id}
        assert await brands.select(filters={"id": []}) == []
        assert len(await brands.select(order_by=["name"], limit=2)) == 2

        updated = await brands.update(b.id, {"name": "ACN Realty"})
        assert updated.name == "ACN Realty"
        assert await brands.update(9999, {"name": "ghost"}) is None

        assert await brands.delete(a.id) is True
        assert await brands.delete(a.id) is False
        assert await brands.get(a.id) is None


@pytest.mark.anyio
async def test_none_filter_matches_null(session_maker):
    async with session_maker() as db:
        brand = await TableStore(db, Brand).insert({"name": "TruEstate"})
        blogs = TableStore(db, Blog)
        await blogs.insert({"brand_id": brand.id, "title": "Scored", "ai_detection_score": 10})
        unscored = await blogs.insert({"brand_id": brand.id, "title": "Unscored"})
        rows = await blogs.select(filters={"ai_detection_score": None})
        assert [r.id for r in rows] == [unscored.id]


@pytest.mark.anyio
async def test_unknown_column_is_rejected(session_maker):
    async with session_maker() as db:
        with pytest.raises(ValueError):
            await TableStore(db, Brand).select(filters={"colour": "red"})


@pytest.mark.anyio
async def test_failed_read_raises_persistence_error(anyio_backend, tmp_path):
    # tables were never created
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    async with async_sessionmaker(engine, class_=AsyncSession)() as db:
        with pytest.raises(PersistenceError) as exc_info:
            await TableStore(db, DailyMetric, retries=0).select()
        assert exc_info.value.status_code == 503
    await engine.dispose()


@pytest.mark.anyio
async def test_safe_select_degrades_to_empty_list(anyio_backend, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    async with async_sessionmaker(engine, class_=AsyncSession)() as db:
        assert await safe_select(TableStore(db, DailyMetric, retries=0), order_by=["-id"]) == []
    await engine.dispose()


@pytest.mark.anyio
async def test_failed_read_keeps_loaded_rows_usable(session_maker, seed):
    brand = await seed(Brand(name="TruEstate"))
    async with session_maker() as db:
        loaded = await TableStore(db, Brand).get(brand.id)
        await db.execute(text("DROP TABLE blogs"))

        assert await safe_select(TableStore(db, Blog, retries=0)) == []
        # still loaded, no lazy refresh needed
        assert loaded.name == "TruEstate"
        assert [b.name for b in await TableStore(db, Brand).select()] == ["TruEstate"]


@pytest.mark.anyio
async def test_update_where_changes_matching_rows(session_maker, seed):
    await seed(
        ActionItem(due_date=date(2024, 6, 1), assigned_to="Asha", task="A"),
        ActionItem(due_date=date(2024, 6, 2), assigned_to="Asha", task="B"),
        ActionItem(due_date=date(2024, 6, 2), assigned_to="Bob", task="C"),
    )
    async with session_maker() as db:
        items = TableStore(db, ActionItem)
        assert await items.update_where({"assigned_to": "Asha"}, {"assigned_to": "Asha K"}) == 2
        assert sorted(i.task for i in await items.select(filters={"assigned_to": "Asha K"})) == ["A", "B"]
        assert [i.task for i in await items.select(filters={"assigned_to": "Bob"})] == ["C"]


def _fake_session(*outcomes):
    session = MagicMock()
    session.execute = AsyncMock(side_effect=list(outcomes))
    session.rollback = AsyncMock()
    savepoint = session.begin_nested.return_value
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    return session


def _result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


@pytest.mark.anyio
async def test_transient_read_error_is_retried():
    transient = OperationalError("SELECT", {}, Exception("connection reset"))
    session = _fake_session(transient, _result(["row"]))

    rows = await TableStore(session, Brand, retries=2, backoff=0).select()

    assert rows == ["row"]
    assert session.execute.await_count == 2
    assert session.begin_nested.call_count == 2
    session.rollback.assert_not_awaited()


@pytest.mark.anyio
async def test_retries_give_up_after_limit():
    transient = OperationalError("SELECT", {}, Exception("connection reset"))
    session = _fake_session(transient, transient, transient)

    with pytest.raises(PersistenceError):
        await TableStore(session, Brand, retries=1, backoff=0).select()
    assert session.execute.await_count == 2


@pytest.mark.anyio
async def test_non_transient_error_is_not_retried():
    session = _fake_session(IntegrityError("SELECT", {}, Exception("constraint")))

    with pytest.raises(PersistenceError):
        await TableStore(session, Brand, retries=3, backoff=0).select()
    assert session.execute.await_count == 1
