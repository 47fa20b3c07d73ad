"""FastAPI dependencies for route handlers.

Common dependencies like database sessions and pagination parameters.
"""

from typing import Annotated

from fastapi import Query

from photoreview.db.session import get_db

__all__ = ["get_db", "PageQuery", "PageSizeQuery"]

# Out-of-range values are normalized by the service (never rejected here)
PageQuery = Annotated[int | None, Query(description="1-based page number (default 1)")]
PageSizeQuery = Annotated[
    int | None, Query(description="Items per page (default 25, clamped to 100)")
]
