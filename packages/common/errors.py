"""Error taxonomy and FastAPI exception handlers.

Every failure leaves the service as `{"success": false, "message": ...}` with a
localized message. Domain code raises the subclasses below; routes never build
error responses by hand.
"""

from __future__ import annotations

import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from .messages import t

log = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures reported to the client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key: str = "internal"

    def __init__(self, message_key: str | None = None, detail: str | None = None) -> None:
        if message_key:
            self.message_key = message_key
        self.detail = detail
        super().__init__(detail or self.message_key)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message_key = "validation"


class UnknownDirection(ValidationError):
    message_key = "unknown_direction"


class InvalidOrExpired(ValidationError):
    message_key = "invalid_or_expired"


class InvalidCredentials(ValidationError):
    message_key = "invalid_credentials"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message_key = "invalid_token"


class MissingToken(AuthError):
    message_key = "missing_token"


class InvalidToken(AuthError):
    message_key = "invalid_token"


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message_key = "forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class TestNotFound(NotFoundError):
    __test__ = False  # not a pytest class
    message_key = "test_not_found"


class DirectionNotFound(NotFoundError):
    message_key = "direction_not_found"


class AccountNotFound(NotFoundError):
    message_key = "account_not_found"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AlreadySubmitted(ConflictError):
    message_key = "already_submitted"


class DirectionInUse(ConflictError):
    message_key = "direction_in_use_tests"


class DuplicateLogin(ConflictError):
    message_key = "duplicate_login"


class DuplicateTelegram(ConflictError):
    message_key = "duplicate_telegram"


class DuplicateDirection(ConflictError):
    message_key = "duplicate_direction"


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key = "storage"


def _lang(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None)
    return settings.APP_LANG if settings is not None else "uz"


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
    else:
        log.info(f"{request.method} {request.url.path} rejected: {type(exc).__name__}")
    return _envelope(exc.status_code, t(exc.message_key, _lang(request)))


# request path suffix -> message for a body that fails validation there
VALIDATION_MESSAGES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"/login$"), "login_required"),
    (re.compile(r"/send-verification$"), "telegram_required"),
    (re.compile(r"/verify-code$"), "telegram_code_required"),
    (re.compile(r"/submit-test$"), "test_payload_required"),
    (re.compile(r"/admin/directions$"), "direction_name_required"),
)


def validation_message_key(path: str) -> str:
    return next((key for pattern, key in VALIDATION_MESSAGES if pattern.search(path)), "validation")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    path = request.url.path
    log.info(f"{request.method} {path} invalid body: {exc.errors()}")
    return _envelope(status.HTTP_400_BAD_REQUEST, t(validation_message_key(path), _lang(request)))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(f"{request.method} {request.url.path} crashed", exc_info=exc)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, t("internal", _lang(request)))


def install_error_handlers(app: FastAPI) -> None:
    """Register the JSON envelope handlers on `app`."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
