"""Exceptions surfaced by the relay and their HTTP status mapping.

Every error raised from a request is resolved into a JSON body of the form
``{"success": false, "error": "<message>"}`` by the handlers registered in
:func:`register_exception_handlers`.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Base class for errors reported back to the caller."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(RelayError):
    """A required field is missing or malformed."""

    status_code = HTTPStatus.BAD_REQUEST


class UnauthorizedError(RelayError):
    """No live credential exists for the identity."""

    status_code = HTTPStatus.UNAUTHORIZED


class PreconditionFailedError(RelayError):
    """A token was submitted before authorization was started."""

    status_code = HTTPStatus.BAD_REQUEST


class UploadFailedError(RelayError):
    """The mandatory object-creation call did not succeed."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class SessionNotFoundError(RelayError):
    """Logout was requested for an identity without a live record."""

    status_code = HTTPStatus.NOT_FOUND


class DriveApiError(Exception):
    """Raised by the Drive client when the provider rejects a call.

    Attributes:
        message: Provider supplied error message, if one was returned.
        status: HTTP status of the failed call.
    """

    def __init__(self, message: Optional[str], status: Optional[int] = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message or f"Drive API call failed (status {status})")


def _error_body(message: str) -> dict:
    return {"success": False, "error": message}


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "form")]
    if first.get("type") == "missing" and location:
        return f"Missing {location[-1]}"
    if location:
        return f"Invalid {'.'.join(location)}: {first.get('msg', 'invalid value')}"
    return first.get("msg", "Invalid request.")


async def _handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content=_error_body(_describe_validation_error(exc)),
    )


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content=_error_body(str(exc) or exc.__class__.__name__),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on ``app``."""
    app.add_exception_handler(RelayError, _handle_relay_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


__all__ = [
    "DriveApiError",
    "InvalidRequestError",
    "PreconditionFailedError",
    "RelayError",
    "SessionNotFoundError",
    "UnauthorizedError",
    "UploadFailedError",
    "register_exception_handlers",
]
