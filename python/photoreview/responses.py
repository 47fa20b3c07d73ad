"""Response envelopes, result unwrapping and exception handlers.

Envelopes:
- success: { "data": ... }
- error:   { "error": { "code": "E_...", "message": "...", "request_id": "..." } }

request_id is taken from the logging context when RequestIDMiddleware is
installed, so a client can quote it when reporting a failure.

unwrap_result() is the single place where service outcomes become HTTP:
- ok -> the value
- not_found -> 404 with the caller's not-found code
- access_denied -> 403 E_FORBIDDEN
- invariant_violation -> 403 E_LAST_OWNER_FORBIDDEN
"""

from typing import Any, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from photoreview.errors import (
    ApiError,
    ApiErrorCode,
    ForbiddenError,
    InvalidRequestError,
    LastOwnerError,
    NotFoundError,
)
from photoreview.logging import get_logger, get_request_id
from photoreview.services.results import Outcome, Result

logger = get_logger(__name__)

T = TypeVar("T")

# Framework-raised HTTP errors (unknown route, wrong method, ...)
_HTTP_STATUS_TO_CODE = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    403: ApiErrorCode.E_FORBIDDEN,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    422: ApiErrorCode.E_INVALID_REQUEST,
}


def success_response(data: Any) -> dict[str, Any]:
    return {"data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Build the error envelope.

    Args:
        code: Error code.
        message: Client-safe message.
        request_id: Correlation id; defaults to the current request's.
    """
    error = {"code": code.value, "message": message}
    request_id = request_id or get_request_id()
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


def unwrap_result(
    result: Result[T], not_found_code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND
) -> T:
    """Return an ok result's value or raise the ApiError for its outcome."""
    if result.outcome is Outcome.OK:
        return result.value
    if result.outcome is Outcome.NOT_FOUND:
        raise NotFoundError(not_found_code, result.reason or "Not found")
    if result.outcome is Outcome.INVARIANT_VIOLATION:
        raise LastOwnerError(result.reason or "Project must retain at least one owner")
    raise ForbiddenError(message=result.reason or "Forbidden")


def _json_error(exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _json_error(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON and schema violations are both 400 E_INVALID_REQUEST."""
    return _json_error(InvalidRequestError())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_STATUS_TO_CODE.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, str(exc.detail) if exc.detail else "An error occurred"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: 500 E_INTERNAL.

    Storage failures land here. The traceback is logged; the client only
    sees the generic message.
    """
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
