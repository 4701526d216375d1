# launcher_server/core/errors.py

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class LauncherError(Exception):
    """
    Base class for errors that map onto an HTTP response.
    The message is sent to the client as-is, so keep it free of internals.
    """
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LauncherError):
    status_code = 400


class ConflictError(LauncherError):
    status_code = 400


class AuthError(LauncherError):
    status_code = 401


class PermissionDeniedError(AuthError):
    status_code = 403


class NotFoundError(LauncherError):
    status_code = 404


class InternalError(LauncherError):
    status_code = 500


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def launcher_error_handler(request: Request, exc: LauncherError):
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(500, "Internal server error")
    return _error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields.append(".".join(location) or "body")
    return _error_response(400, f"Missing or invalid fields: {', '.join(fields)}")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(LauncherError, launcher_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
