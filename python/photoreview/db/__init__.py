"""Database layer: engine, sessions, transactions and the ORM models."""

from photoreview.db.engine import create_db_engine, get_engine
from photoreview.db.models import (
    Base,
    Library,
    Photo,
    PhotoReview,
    Project,
    ProjectMember,
    User,
    UserRole,
    WorkStatus,
)
from photoreview.db.session import create_session_factory, get_db, transaction

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_db",
    "transaction",
    "Base",
    "UserRole",
    "WorkStatus",
    "User",
    "Project",
    "ProjectMember",
    "Library",
    "Photo",
    "PhotoReview",
]
