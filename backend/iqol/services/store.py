"""
Table Store: the persistence primitives every router composes:
select(filters, order_by, limit), get, insert, update(id, partial), delete(id).

SQLAlchemy failures are re-raised as PersistenceError. Reads run inside a
SAVEPOINT, so a failed read rolls back only itself and leaves the request's
loaded objects (the current user, brands already fetched) intact. List views
read through safe_select(), which degrades to an empty list with a logged
warning; writes propagate so get_db() rolls the whole request back.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select as sa_select, update as sa_update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.config import get_settings
from iqol.errors import PersistenceError

logger = logging.getLogger(__name__)


def _is_transient(exc: SQLAlchemyError) -> bool:
    # an invalidated connection cannot be reused without a full session rollback
    return isinstance(exc, OperationalError) and not exc.connection_invalidated


class TableStore:
    """Typed CRUD over one mapped table."""

    def __init__(
        self,
        session: AsyncSession,
        model,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
    ):
        settings = get_settings()
        self.session = session
        self.model = model
        self.table = model.__tablename__
        self.retries = settings.persistence_retries if retries is None else retries
        self.backoff = settings.persistence_retry_backoff if backoff is None else backoff

    def _column(self, name: str):
        column = getattr(self.model, name, None)
        if column is None:
            raise ValueError(f"{self.table} has no column {name!r}")
        return column

    def _where(self, query, filters: Optional[dict]):
        for name, value in (filters or {}).items():
            column = self._column(name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.where(column.in_(list(value)))
            elif value is None:
                query = query.where(column.is_(None))
            else:
                query = query.where(column == value)
        return query

    def _build_select(self, filters: Optional[dict], order_by: Optional[Sequence[str]], limit: Optional[int]):
        query = self._where(sa_select(self.model), filters)
        for key in order_by or ():
            descending = key.startswith("-")
            column = self._column(key.lstrip("-"))
            query = query.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            query = query.limit(limit)
        return query

    async def select(
        self,
        filters: Optional[dict] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> list:
        """
        Rows matching ``filters``. A list/tuple/set value becomes an IN clause
        (an empty one matches nothing). ``order_by`` entries are column names,
        prefixed with "-" for descending.

        Each attempt runs in its own SAVEPOINT. Transient errors are retried up
        to ``retries`` times with exponential backoff.
        """
        query = self._build_select(filters, order_by, limit)
        attempt = 0
        while True:
            try:
                async with self.session.begin_nested():
                    result = await self.session.execute(query)
                    rows = list(result.scalars().all())
                return rows
            except SQLAlchemyError as exc:
                if attempt >= self.retries or not _is_transient(exc):
                    raise PersistenceError(f"Failed to read {self.table}: {exc}") from exc
                delay = self.backoff * (2 ** attempt)
                attempt += 1
                logger.warning(f"Transient error reading {self.table} (attempt {attempt}/{self.retries}), retrying in {delay:.2f}s: {exc}")
                await asyncio.sleep(delay)

    async def get(self, id: Any):
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to read {self.table} {id}: {exc}") from exc

    async def insert(self, values: dict):
        row = self.model(**values)
        try:
            self.session.add(row)
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(f"Insert into {self.table} failed: {exc}")
            raise PersistenceError(f"Failed to save {self.table} record: {exc}") from exc
        return row

    async def update(self, id: Any, partial: dict):
        """Apply ``partial`` to row ``id``. Returns the row, or None if it does not exist."""
        row = await self.get(id)
        if row is None:
            return None
        for name, value in partial.items():
            self._column(name)
            setattr(row, name, value)
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(f"Update of {self.table} {id} failed: {exc}")
            raise PersistenceError(f"Failed to update {self.table} record: {exc}") from exc
        return row

    async def update_where(self, filters: dict, values: dict) -> int:
        """Set ``values`` on every row matching ``filters``; returns the row count."""
        for name in values:
            self._column(name)
        statement = self._where(sa_update(self.model), filters).values(**values)
        try:
            result = await self.session.execute(statement.execution_options(synchronize_session="fetch"))
        except SQLAlchemyError as exc:
            logger.error(f"Bulk update of {self.table} failed: {exc}")
            raise PersistenceError(f"Failed to update {self.table} records: {exc}") from exc
        return result.rowcount

    async def delete(self, id: Any) -> bool:
        row = await self.get(id)
        if row is None:
            return False
        try:
            await self.session.delete(row)
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(f"Delete from {self.table} {id} failed: {exc}")
            raise PersistenceError(f"Failed to delete {self.table} record: {exc}") from exc
        return True


async def safe_select(store: TableStore, **kwargs) -> list:
    """Read for display: a failed read shows as an empty list instead of an error page."""
    try:
        return await store.select(**kwargs)
    except PersistenceError as exc:
        logger.warning(f"Showing empty {store.table} list after read failure: {exc}")
        return []
