"""
User persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from postboard.core import db
from postboard.core.errors import InsertFailed

from .schemas import User

TABLE = "users"

INSERT_USER = db.insert_statement(TABLE, User)
SELECT_USERS = db.select_statement(TABLE, User)


async def insert_user(conn: asyncpg.Connection, user: User) -> User:
    row = await db.fetch_one(conn, INSERT_USER.sql, *INSERT_USER.params(user))
    row = db.require_row(row, InsertFailed, "INSERT INTO users returned no row.")
    return db.map_row(User, row)


async def list_users(conn: asyncpg.Connection) -> list[User]:
    rows = await db.fetch_all(conn, SELECT_USERS)
    return db.map_rows(User, rows)
