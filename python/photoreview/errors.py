"""HTTP-facing error codes and exceptions.

Services report access, visibility and governance outcomes as tagged
results (photoreview.services.results); the route layer turns those into
the exceptions below via responses.unwrap_result(). ApiError is also raised
directly by the auth layer and caught by the exception handlers, which
render the { "error": {...} } envelope.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Machine-readable error codes, E_<CATEGORY>."""

    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"

    E_FORBIDDEN = "E_FORBIDDEN"
    E_LAST_OWNER_FORBIDDEN = "E_LAST_OWNER_FORBIDDEN"

    E_NOT_FOUND = "E_NOT_FOUND"
    E_PROJECT_NOT_FOUND = "E_PROJECT_NOT_FOUND"
    E_LIBRARY_NOT_FOUND = "E_LIBRARY_NOT_FOUND"
    E_PHOTO_NOT_FOUND = "E_PHOTO_NOT_FOUND"
    E_MEMBER_NOT_FOUND = "E_MEMBER_NOT_FOUND"

    E_INVALID_REQUEST = "E_INVALID_REQUEST"

    E_INTERNAL = "E_INTERNAL"


ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_FORBIDDEN: 403,
    ApiErrorCode.E_LAST_OWNER_FORBIDDEN: 403,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_PROJECT_NOT_FOUND: 404,
    ApiErrorCode.E_LIBRARY_NOT_FOUND: 404,
    ApiErrorCode.E_PHOTO_NOT_FOUND: 404,
    ApiErrorCode.E_MEMBER_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """An error with a code, a client-safe message and an HTTP status."""

    def __init__(self, code: ApiErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)


class NotFoundError(ApiError):
    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ForbiddenError(ApiError):
    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_FORBIDDEN, message: str = "Forbidden"):
        super().__init__(code, message)


class LastOwnerError(ForbiddenError):
    """The change would leave a project without an owner."""

    def __init__(self, message: str = "Project must retain at least one owner"):
        super().__init__(ApiErrorCode.E_LAST_OWNER_FORBIDDEN, message)


class InvalidRequestError(ApiError):
    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)
