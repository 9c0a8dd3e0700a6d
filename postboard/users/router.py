"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from postboard.core import db

from . import repository
from .schemas import User

router = APIRouter()


@router.post("/users", response_model=User)
async def add_user(
    user: User,
    database: db.Database = Depends(db.get_database),
) -> User:
    async with database.connection() as conn:
        return await repository.insert_user(conn, user)


@router.get("/users", response_model=list[User])
async def get_users(
    database: db.Database = Depends(db.get_database),
) -> list[User]:
    async with database.connection() as conn:
        return await repository.list_users(conn)
