from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

_LOG = logging.getLogger("devcamper.errors")


class ApiError(HTTPException):
    """Error carrying a message and status code, rendered as the JSON error envelope."""

    status_code_default = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(status_code=status_code or self.status_code_default, detail=message)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationFailed(ApiError):
    status_code_default = 400


class Unauthorized(ApiError):
    status_code_default = 401


class Forbidden(ApiError):
    status_code_default = 403


class NotFound(ApiError):
    status_code_default = 404


class InternalFailure(ApiError):
    status_code_default = 500


def error_envelope(message: str, status_code: int, headers: dict | None = None) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        text = str(err.get("msg") or "Invalid value")
        messages.append(f"{'.'.join(loc)}: {text}" if loc else text)
    return ", ".join(messages) or "Invalid request"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return error_envelope(str(exc.detail), exc.status_code, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return error_envelope(_validation_message(exc), 400)

    @app.exception_handler(IntegrityError)
    async def _integrity_error(request: Request, exc: IntegrityError):
        _LOG.info("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        if "foreign key" in str(exc.orig).lower():
            return error_envelope("Record is referenced by other resources", 400)
        return error_envelope("Duplicate field value entered", 400)

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        _LOG.exception("unhandled error on %s %s", request.method, request.url.path)
        return error_envelope("Server Error", 500)
