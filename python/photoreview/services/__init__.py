"""Business logic services.

Services are called by route handlers and orchestrate database operations.
Each takes an explicit Session and the caller's user id (viewer_id) and
returns either a pydantic model, a Page, or a tagged Result.
"""

from photoreview.services.results import (
    Outcome,
    Result,
    access_denied,
    invariant_violation,
    not_found,
    ok,
)

__all__ = [
    "Outcome",
    "Result",
    "ok",
    "access_denied",
    "not_found",
    "invariant_violation",
]
