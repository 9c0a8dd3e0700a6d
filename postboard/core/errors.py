"""
Service error taxonomy and its HTTP mapping.

Data-access code raises a `ServiceError` subclass; the handler registered by
`register_handlers` turns it into a response. Only pool failures carry their
detail to the client; every other 5xx body is empty and the cause is logged.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    status_code = 500
    expose_detail = False


class NotFound(ServiceError):
    """A lookup expected a row and got none."""

    status_code = 404


class InsertFailed(ServiceError):
    """An INSERT ... RETURNING produced no row."""


class DatabaseError(ServiceError):
    """The driver failed while executing a statement."""


class MappingError(ServiceError):
    """A result row does not fit the target record shape."""


class PoolError(ServiceError):
    """No connection could be leased from the pool."""

    expose_detail = True


def error_response(exc: ServiceError) -> Response:
    if exc.expose_detail:
        return PlainTextResponse(str(exc), status_code=exc.status_code)
    return Response(status_code=exc.status_code)


async def _service_error_handler(request: Request, exc: ServiceError) -> Response:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s kind=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
    else:
        logger.info(
            "request_rejected method=%s path=%s kind=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )
    return error_response(exc)


def register_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
