"""Dependency checks for the readiness probe."""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photoreview.logging import get_logger

logger = get_logger(__name__)


def database_ready(db: Session) -> bool:
    """True if the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("database_unavailable", exc_info=True)
        return False
    return True
