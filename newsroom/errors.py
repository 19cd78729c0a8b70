"""API error types and their JSON rendering.

Every error body has the shape ``{"error": "<message>"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class ApiError(Exception):
    """An error that maps directly to an HTTP status and a short message."""

    status_code: int = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class SearchValidationError(ApiError):
    """Rejected query parameters.

    400 for malformed input (missing or oversized ``q``),
    422 for well-formed but unknown values (an entry in ``types``).
    """

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
