"""Request correlation and access logging.

RequestIDMiddleware gives every request an id:

- a well-formed incoming X-Request-ID (1-128 chars of [A-Za-z0-9._-]) is
  kept, UUIDs lowercased
- anything else, or no header, gets a fresh UUID4

The id is bound into the logging context, echoed on the response and
copied into error envelopes. The middleware must be the outermost one so
that 401s produced by AuthMiddleware carry it too.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from photoreview.logging import bind_request, bind_user, clear_request_context, get_logger

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,128}")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Pick the id for a request from its X-Request-ID header value."""
    if not incoming or not _REQUEST_ID_RE.fullmatch(incoming):
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(incoming)) if len(incoming) == 36 else incoming
    except ValueError:
        return incoming


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the request and log one access entry.

    Args:
        app: The ASGI application.
        log_requests: Emit request_completed for every response when True.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        bind_request(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed")
            raise
        else:
            # AuthMiddleware binds the user in a child context; re-bind it here
            viewer = getattr(request.state, "viewer", None)
            if viewer is not None:
                bind_user(str(viewer.user_id))

            response.headers[REQUEST_ID_HEADER] = request_id
            if self.log_requests:
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - started) * 1000, 2),
                )
            return response
        finally:
            clear_request_context()
