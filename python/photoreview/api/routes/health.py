"""Liveness and readiness probes. Both are public."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from photoreview.api.deps import get_db
from photoreview.errors import ApiErrorCode
from photoreview.responses import error_response, success_response
from photoreview.services.health import database_ready

router = APIRouter()


@router.get("/health")
def health_check() -> dict:
    """200 while the process is up. Touches nothing else."""
    return success_response({"status": "ok"})


@router.get("/ready")
def readiness_check(db: Annotated[Session, Depends(get_db)]) -> Response:
    """200 when the database answers, 503 otherwise."""
    if database_ready(db):
        return JSONResponse(content=success_response({"status": "ready"}))
    return JSONResponse(
        status_code=503,
        content=error_response(ApiErrorCode.E_INTERNAL, "Database unavailable"),
    )
