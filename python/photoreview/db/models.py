"""SQLAlchemy ORM models for photoreview.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Status-like columns are Text guarded by CHECK constraints; the allowed
values are mirrored by the Python enums below.

Column types are the portable SQLAlchemy types (Uuid, UTC DateTime, JSON with a
JSONB variant) so the same metadata serves PostgreSQL in production and
SQLite in the test suite.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Timezone-aware current time used for every timestamp column."""
    return datetime.now(UTC)


class UtcDateTime(TypeDecorator):
    """Timezone-aware timestamp, stored and returned in UTC.

    PostgreSQL keeps the offset in timestamptz. SQLite has no timestamp type
    and hands back naive values, which are read as UTC here.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC)
        return value

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, PyEnum):
    """Informational account role. Authorization never consults it."""

    admin = "admin"
    reviewer = "reviewer"


class WorkStatus(str, PyEnum):
    """Lifecycle status shared by projects and libraries."""

    active = "active"
    processing = "processing"
    completed = "completed"


# =============================================================================
# Models
# =============================================================================


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=UserRole.reviewer.value)
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'reviewer')", name="ck_users_role"),
    )

    memberships: Mapped[list["ProjectMember"]] = relationship(
        "ProjectMember", back_populates="user", cascade="all, delete-orphan"
    )


class Project(Base):
    """Project model - the authorization root for libraries, photos and reviews."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=WorkStatus.active.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    root_path: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'processing', 'completed')",
            name="ck_projects_status",
        ),
    )

    members: Mapped[list["ProjectMember"]] = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    libraries: Mapped[list["Library"]] = relationship(
        "Library", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )


class ProjectMember(Base):
    """Project membership - the only source of visibility and ownership.

    At most one row per (project, user). The "at least one owner" rule is
    enforced by photoreview.services.governance, not by the schema.
    """

    __tablename__ = "project_members"

    project_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    is_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )

    project: Mapped["Project"] = relationship("Project", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")


class Library(Base):
    """A folder of photos inside a project. Has no membership of its own."""

    __tablename__ = "library"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    absolute_path: Mapped[str] = mapped_column(Text, nullable=False)
    project_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default=WorkStatus.active.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'processing', 'completed')",
            name="ck_library_status",
        ),
    )

    project: Mapped["Project"] = relationship("Project", back_populates="libraries")


class Photo(Base):
    """A single image file registered in a library."""

    __tablename__ = "photos"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    library_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("library.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    absolute_path: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )

    __table_args__ = (Index("idx_photos_project", "project_id"),)


class PhotoReview(Base):
    """One user's private judgment of one photo.

    The (photo_id, user_id) unique constraint is the serialization point for
    concurrent upserts (see photoreview.services.reviews).
    """

    __tablename__ = "photo_reviews"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    photo_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    library_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("library.id", ondelete="CASCADE"), nullable=False
    )
    seen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    decision: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    renamed_to: Mapped[str | None] = mapped_column(Text, nullable=True)
    seen_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=utcnow, nullable=False
    )
    voted_at: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("photo_id", "user_id", name="uq_photo_reviews_photo_user"),
        CheckConstraint(
            "decision IS NULL OR decision IN (-1, 1)",
            name="ck_photo_reviews_decision",
        ),
        Index("idx_reviews_user", "user_id"),
        Index("idx_reviews_photo_decision", "photo_id", "decision"),
    )
