"""
Post persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from postboard.core import db
from postboard.core.errors import InsertFailed

from .schemas import Post

TABLE = "posts"
LIST_LIMIT = 100

INSERT_POST = db.insert_statement(TABLE, Post, server_assigned=("created_at",))
SELECT_RECENT_POSTS = db.select_statement(
    TABLE,
    Post,
    suffix=f"ORDER BY created_at DESC LIMIT {LIST_LIMIT}",
)


async def insert_post(conn: asyncpg.Connection, post: Post) -> Post:
    row = await db.fetch_one(conn, INSERT_POST.sql, *INSERT_POST.params(post))
    row = db.require_row(row, InsertFailed, "INSERT INTO posts returned no row.")
    return db.map_row(Post, row)


async def list_posts(conn: asyncpg.Connection) -> list[Post]:
    """
    Return the newest posts first, at most `LIST_LIMIT` of them.
    """
    rows = await db.fetch_all(conn, SELECT_RECENT_POSTS)
    return db.map_rows(Post, rows)
