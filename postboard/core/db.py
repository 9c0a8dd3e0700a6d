"""
Async database access helpers (raw SQL) using asyncpg.

The pool is owned by a `Database` object that the app factory stores on
`app.state.database`; handlers get it through the `get_database` dependency
and lease one connection per request with `database.connection()`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Statements for a table are derived from the pydantic model that describes a
row, so column lists and bound values always follow the record shape.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import asyncpg
from fastapi import Request
from pydantic import BaseModel, ValidationError

from .config import Settings
from .errors import DatabaseError, MappingError, PoolError, ServiceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Failures that mean the driver or server could not run a statement.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError)


class Database:
    def __init__(self, pool: Any, *, acquire_timeout: float | None = None) -> None:
        self.pool = pool
        self.acquire_timeout = acquire_timeout

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Lease one connection for the duration of the block.

        The connection goes back to the pool when the block exits, whether it
        exits normally or by exception.
        """
        try:
            conn = await self.pool.acquire(timeout=self.acquire_timeout)
        except asyncio.TimeoutError as exc:
            raise PoolError(
                f"Timed out after {self.acquire_timeout}s waiting for a database connection."
            ) from exc
        except _DRIVER_ERRORS as exc:
            raise PoolError(f"Failed to acquire a database connection: {exc}") from exc

        try:
            yield conn
        finally:
            await self.pool.release(conn)

    async def close(self) -> None:
        await self.pool.close()


async def create_database(settings: Settings) -> Database:
    try:
        pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            command_timeout=settings.command_timeout,
            statement_cache_size=settings.statement_cache_size,
        )
    except _DRIVER_ERRORS:
        logger.exception("pool_init_failed")
        raise
    logger.info(
        "pool_ready min_size=%s max_size=%s",
        settings.pool_min_size,
        settings.pool_max_size,
    )
    return Database(pool, acquire_timeout=settings.pool_timeout)


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise PoolError("Database pool is not initialized.")
    return database


async def fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> asyncpg.Record | None:
    """
    Run a query and return its first row (or None).
    """
    try:
        return await conn.fetchrow(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(f"Query failed: {exc}") from exc


async def fetch_all(conn: asyncpg.Connection, sql: str, *args: Any) -> list[asyncpg.Record]:
    """
    Run a query and return all rows.
    """
    try:
        return await conn.fetch(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(f"Query failed: {exc}") from exc


def require_row(row: Any | None, error: type[ServiceError], message: str = "") -> Any:
    if row is None:
        raise error(message or "Expected a row, got none.")
    return row


def map_row(model: type[ModelT], record: Any) -> ModelT:
    try:
        return model.model_validate(dict(record))
    except (ValidationError, TypeError, ValueError) as exc:
        raise MappingError(f"Row does not match {model.__name__}: {exc}") from exc


def map_rows(model: type[ModelT], records: Iterable[Any]) -> list[ModelT]:
    return [map_row(model, record) for record in records]


def columns(model: type[BaseModel], *, exclude: Iterable[str] = ()) -> tuple[str, ...]:
    skipped = set(exclude)
    return tuple(name for name in model.model_fields if name not in skipped)


@dataclass(frozen=True)
class InsertStatement:
    sql: str
    columns: tuple[str, ...]

    def params(self, record: BaseModel) -> list[Any]:
        return [getattr(record, name) for name in self.columns]


def insert_statement(
    table: str,
    model: type[BaseModel],
    *,
    server_assigned: Sequence[str] = (),
) -> InsertStatement:
    """
    Build `INSERT ... RETURNING` for `model`.

    Columns in `server_assigned` are left to the store on insert but still
    come back in RETURNING.
    """
    insert_columns = columns(model, exclude=server_assigned)
    placeholders = ", ".join(f"${i}" for i in range(1, len(insert_columns) + 1))
    sql = (
        f"INSERT INTO {table} ({', '.join(insert_columns)}) "
        f"VALUES ({placeholders}) "
        f"RETURNING {', '.join(columns(model))}"
    )
    return InsertStatement(sql=sql, columns=insert_columns)


def select_statement(table: str, model: type[BaseModel], *, suffix: str = "") -> str:
    sql = f"SELECT {', '.join(columns(model))} FROM {table}"
    return f"{sql} {suffix}" if suffix else sql
