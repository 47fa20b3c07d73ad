"""Bearer-token authentication.

AuthMiddleware verifies the Authorization header of every non-public
request and stores the caller as request.state.viewer. Routes take the
viewer through the get_viewer dependency and pass viewer.user_id to the
service layer as viewer_id; nothing below the route layer sees tokens.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from photoreview.auth.verifier import TokenVerifier
from photoreview.errors import ApiError, ApiErrorCode
from photoreview.logging import bind_user
from photoreview.responses import error_response

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/health", "/ready", "/docs", "/redoc", "/openapi.json"})

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Viewer:
    """The authenticated caller. user_id is the token's sub claim."""

    user_id: UUID


def _unauthenticated(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_response(ApiErrorCode.E_UNAUTHENTICATED, message),
    )


def parse_bearer(header: str | None) -> str | None:
    """Return the token from an Authorization header, or None if malformed."""
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject requests without a valid bearer token (401 E_UNAUTHENTICATED)."""

    def __init__(self, app: ASGIApp, verifier: TokenVerifier):
        super().__init__(app)
        self.verifier = verifier

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        header = request.headers.get("authorization")
        token = parse_bearer(header)
        if token is None:
            reason = "missing_header" if not header else "invalid_header_format"
            logger.warning("auth_failure", extra={"reason": reason, "path": request.url.path})
            return _unauthenticated(
                "Authentication required" if not header else "Invalid authorization header format"
            )

        try:
            claims = self.verifier.verify(token)
        except ApiError as e:
            return _unauthenticated(e.message)

        viewer = Viewer(user_id=UUID(claims["sub"]))
        request.state.viewer = viewer
        bind_user(str(viewer.user_id))
        return await call_next(request)


def get_viewer(request: Request) -> Viewer:
    """Dependency returning the authenticated viewer.

    Raises:
        ApiError(E_UNAUTHENTICATED): No viewer on the request (public path or
            middleware not installed).
    """
    viewer = getattr(request.state, "viewer", None)
    if viewer is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return viewer
