from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from postboard.core import db, errors
from postboard.core.config import Settings, load_settings
from postboard.core.log import AccessLogMiddleware, configure_logging
from postboard.posts import router as posts_router
from postboard.users import router as users_router

logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    database: db.Database | None = None,
) -> FastAPI:
    """
    Build the ASGI app.

    Pass `database` to serve from an existing pool (it is left open on
    shutdown); otherwise a pool is created from `settings` on startup and
    closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            app.state.database = database
            yield
            return

        app.state.database = await db.create_database(settings or load_settings())
        try:
            yield
        finally:
            await app.state.database.close()
            app.state.database = None

    app = FastAPI(lifespan=lifespan)
    if database is not None:
        app.state.database = database

    app.add_middleware(GZipMiddleware)
    app.add_middleware(AccessLogMiddleware)
    errors.register_handlers(app)

    app.include_router(users_router.router, tags=["users"])
    app.include_router(posts_router.router, tags=["posts"])

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "test"

    return app


def run() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    host, port = settings.bind

    app = create_app(settings=settings)
    logger.info("Server running at http://%s/", settings.server_addr)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
