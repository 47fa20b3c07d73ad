"""Application factory.

create_app() wires exception handlers, routes and authentication. The
request-id middleware is added separately by add_request_id_middleware()
after everything else: Starlette runs middleware in reverse order of
registration, so the last one added is the outermost and every response,
including a 401 from AuthMiddleware, gets an X-Request-ID.

Per request:
    RequestIDMiddleware -> AuthMiddleware -> route -> AuthMiddleware -> RequestIDMiddleware
"""

from fastapi import FastAPI

from photoreview.api.routes import create_api_router
from photoreview.auth.middleware import AuthMiddleware
from photoreview.auth.verifier import JwtVerifier, TokenVerifier
from photoreview.config import get_settings
from photoreview.logging import configure_logging, get_logger
from photoreview.middleware.request_id import RequestIDMiddleware
from photoreview.responses import register_exception_handlers

configure_logging()

logger = get_logger(__name__)


def create_token_verifier() -> JwtVerifier:
    """Build the JWT verifier from JWT_SECRET / JWT_ISSUER / JWT_AUDIENCE."""
    settings = get_settings()
    return JwtVerifier(
        secret=settings.effective_jwt_secret,
        issuer=settings.normalized_issuer,
        audiences=settings.audience_list,
    )


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Create the photo review API.

    Args:
        skip_auth_middleware: Leave authentication out (public-endpoint tests).
        token_verifier: Verifier to use instead of the settings-based one.
    """
    app = FastAPI(
        title="Photoreview API",
        description="Collaborative photo review: projects, libraries, photos and reviews",
        version="0.1.0",
    )
    register_exception_handlers(app)
    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(AuthMiddleware, verifier=token_verifier or create_token_verifier())
        logger.info("auth_middleware_enabled")

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Install RequestIDMiddleware as the outermost middleware.

    Call after every other add_middleware().
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
