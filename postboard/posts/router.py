"""
Post API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from postboard.core import db

from . import repository
from .schemas import Post

router = APIRouter()


@router.post("/posts", response_model=Post)
async def add_post(
    post: Post,
    database: db.Database = Depends(db.get_database),
) -> Post:
    async with database.connection() as conn:
        return await repository.insert_post(conn, post)


@router.get("/posts", response_model=list[Post])
async def get_posts(
    database: db.Database = Depends(db.get_database),
) -> list[Post]:
    async with database.connection() as conn:
        return await repository.list_posts(conn)
