"""
Error taxonomy for the HTTP API and the handlers that render it.

Every error leaves the service as ``{"error": <message>}`` with the status
code of the raised class.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(ApiError):
    status_code = 400


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class InternalError(ApiError):
    status_code = 500


@contextmanager
def internal_errors(context: str) -> Iterator[None]:
    """
    Turn any unexpected failure inside the block into an ``InternalError``.

    ``ApiError`` subclasses pass through untouched so handlers can still
    answer 400/403/404.
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception("Error in %s: %s", context, exc)
        raise InternalError("Internal Server Error") from exc


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "query")
    message = first.get("msg", "Invalid value")
    return f"Invalid {location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error_handler(request: Request, exc: ApiError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"error": _first_validation_message(exc)}, status_code=400
        )
