from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from postboard.core.db import Database
from postboard.main import create_app
from postboard.posts import repository as posts_repository
from postboard.users import repository as users_repository


class FakeConnection:
    """Stands in for an asyncpg connection over in-memory `users`/`posts` tables."""

    def __init__(self, store: "FakeStore") -> None:
        self.store = store

    async def fetchrow(self, sql: str, *args):
        self.store.executed.append((sql, args))
        if self.store.error is not None:
            raise self.store.error
        if self.store.empty_inserts:
            return None

        if sql == users_repository.INSERT_USER.sql:
            row = dict(zip(users_repository.INSERT_USER.columns, args))
            self.store.users.append(row)
            return dict(row)
        if sql == posts_repository.INSERT_POST.sql:
            row = dict(zip(posts_repository.INSERT_POST.columns, args))
            row["created_at"] = self.store.next_timestamp()
            self.store.posts.append(row)
            return dict(row)
        raise AssertionError(f"unexpected statement: {sql}")

    async def fetch(self, sql: str, *args):
        self.store.executed.append((sql, args))
        if self.store.error is not None:
            raise self.store.error

        if sql == users_repository.SELECT_USERS:
            return [dict(row) for row in self.store.users]
        if sql == posts_repository.SELECT_RECENT_POSTS:
            ordered = sorted(self.store.posts, key=lambda row: row["created_at"], reverse=True)
            return [dict(row) for row in ordered[: posts_repository.LIST_LIMIT]]
        raise AssertionError(f"unexpected statement: {sql}")


class FakeStore:
    def __init__(self) -> None:
        self.users: list[dict] = []
        self.posts: list[dict] = []
        self.executed: list[tuple[str, tuple]] = []
        self.error: Exception | None = None
        self.empty_inserts = False
        self._clock = datetime(2024, 1, 1, 12, 0, 0)

    def next_timestamp(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock


class FakePool:
    """Mimics the parts of `asyncpg.Pool` that `Database` uses."""

    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.acquire_error: Exception | None = None
        self.acquired = 0
        self.released = 0
        self.closed = False

    async def acquire(self, *, timeout=None):
        if self.acquire_error is not None:
            raise self.acquire_error
        self.acquired += 1
        return FakeConnection(self.store)

    async def release(self, conn) -> None:
        self.released += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def pool(store: FakeStore) -> FakePool:
    return FakePool(store)


@pytest.fixture()
def database(pool: FakePool) -> Database:
    return Database(pool, acquire_timeout=0.5)


@pytest.fixture()
def client(database: Database):
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def run():
    return asyncio.run
