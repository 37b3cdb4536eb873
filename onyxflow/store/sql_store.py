"""SQLAlchemy-backed remote store.

Talks to the ``clients``/``projects`` tables through an async engine.
Foreign keys are enforced, so deleting a client that still owns projects
is rejected by the database exactly like the hosted backend rejects it.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncGenerator

from sqlalchemy import Date, DateTime, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from onyxflow.errors import RemoteStoreError
from onyxflow.store.tables import Base, ProjectRow, TABLE_MODELS

logger = logging.getLogger(__name__)


def _row_to_dict(row: Base) -> dict:
    data = {col.name: getattr(row, col.name) for col in row.__table__.columns}
    if isinstance(row, ProjectRow):
        data["client"] = _row_to_dict(row.client)
    return data


class SqlStore:
    """Remote store over SQLite or PostgreSQL."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    @asynccontextmanager
    async def _session(self, table: str, action: str) -> AsyncGenerator[AsyncSession, None]:
        """Session with commit/rollback; database errors become RemoteStoreError."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{action} on {table} failed: {e}")
                raise RemoteStoreError(f"{action} on {table} failed: {e}", table=table) from e

    @staticmethod
    def _model(table: str) -> type[Base]:
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise RemoteStoreError(f"Unknown table '{table}'", table=table) from None

    @staticmethod
    def _coerce(model: type[Base], table: str, values: dict) -> dict:
        """Check column names and parse ISO date strings for date columns."""
        columns = model.__table__.columns
        coerced = {}
        for key, value in values.items():
            if key not in columns:
                raise RemoteStoreError(f"Unknown column '{key}' in {table}", table=table)
            column_type = columns[key].type
            try:
                if isinstance(value, str) and isinstance(column_type, DateTime):
                    value = datetime.fromisoformat(value)
                elif isinstance(value, str) and isinstance(column_type, Date):
                    value = date.fromisoformat(value[:10])
            except ValueError as e:
                raise RemoteStoreError(f"Invalid value for {table}.{key}: {e}", table=table) from e
            coerced[key] = value
        return coerced

    async def select(
        self, table: str, *, order_by: str = "created_at", descending: bool = True
    ) -> list[dict]:
        model = self._model(table)
        if order_by not in model.__table__.columns:
            raise RemoteStoreError(f"Unknown column '{order_by}' in {table}", table=table)
        column = getattr(model, order_by)
        stmt = select(model).order_by(column.desc() if descending else column.asc())
        if model is ProjectRow:
            stmt = stmt.options(selectinload(ProjectRow.client))

        async with self._session(table, "select") as session:
            rows = (await session.scalars(stmt)).all()
            return [_row_to_dict(r) for r in rows]

    async def insert(self, table: str, row: dict) -> dict:
        model = self._model(table)
        obj = model(**self._coerce(model, table, row))

        async with self._session(table, "insert") as session:
            session.add(obj)
            await session.flush()
            if isinstance(obj, ProjectRow):
                await session.refresh(obj, attribute_names=["client"])
            data = _row_to_dict(obj)

        logger.info(f"Inserted into {table}: {data['id']}")
        return data

    async def update(self, table: str, row_id: str, values: dict) -> None:
        model = self._model(table)
        stmt = (
            update(model)
            .where(model.id == row_id)
            .values(**self._coerce(model, table, values))
        )
        async with self._session(table, "update") as session:
            await session.execute(stmt)

    async def delete(self, table: str, *, column: str, value: str) -> None:
        model = self._model(table)
        if column not in model.__table__.columns:
            raise RemoteStoreError(f"Unknown column '{column}' in {table}", table=table)
        stmt = delete(model).where(getattr(model, column) == value)
        async with self._session(table, "delete") as session:
            result = await session.execute(stmt)
            deleted = result.rowcount
        logger.info(f"Deleted {deleted} row(s) from {table} where {column}={value}")

    async def close(self) -> None:
        await self.engine.dispose()
