"""Membership-scoped queries.

Every listing and single-entity lookup over projects, libraries, photos and
reviews is built from one of the factories in this module. Each factory
declares how its resource reaches a project id and joins project_members on
that id and the viewer, so the statement is intersected with the viewer's
membership before any caller filter is added.

ScopedQuery only narrows (where/join); it offers no way to drop the
membership join. Callers must not post-filter results.

Totals: page() computes the total with count(*) OVER () in the same
statement as the items, so items and total always come from one snapshot.
A separate COUNT is issued only when the requested page lies past the last
row and the window count has no row to ride on, or when the page lies beyond
the range a 64-bit OFFSET can express.
"""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, Row, Select, func, select
from sqlalchemy.orm import Session

from photoreview.auth.permissions import membership_join
from photoreview.db.models import Library, Photo, PhotoReview, Project, ProjectMember
from photoreview.services.pagination import PageParams, normalize_pagination


class ScopedQuery:
    """A select statement already intersected with the viewer's memberships."""

    def __init__(self, stmt: Select, order_by: Sequence[Any]):
        self._stmt = stmt
        self._order_by = tuple(order_by)

    def where(self, *criteria: ColumnElement[bool]) -> "ScopedQuery":
        """Return a narrower query with caller-supplied filters applied."""
        return ScopedQuery(self._stmt.where(*criteria), self._order_by)

    def join(self, target: Any, onclause: ColumnElement[bool]) -> "ScopedQuery":
        """Return a narrower query inner-joined to another entity."""
        return ScopedQuery(self._stmt.join(target, onclause), self._order_by)

    def first(self, db: Session) -> Row | None:
        """Single-entity lookup. None means absent from the viewer's perspective."""
        return db.execute(self._stmt.limit(1)).first()

    def count(self, db: Session) -> int:
        """Number of rows matching the scoped, filtered predicate."""
        subquery = self._stmt.order_by(None).subquery()
        return db.execute(select(func.count()).select_from(subquery)).scalar_one()

    def page(
        self, db: Session, page: int | None, page_size: int | None
    ) -> tuple[list[tuple], int, PageParams]:
        """Fetch one page of rows plus the total.

        Returns:
            (rows, total, params) where rows are tuples of the selected
            entities/columns and params are the effective bounds.
        """
        params = normalize_pagination(page, page_size)
        if params.out_of_range:
            return [], self.count(db), params

        stmt = (
            self._stmt.add_columns(func.count().over().label("scoped_total"))
            .order_by(*self._order_by)
            .offset(params.offset)
            .limit(params.limit)
        )
        rows = db.execute(stmt).all()

        if rows:
            total = rows[0][-1]
        elif params.offset == 0:
            total = 0
        else:
            total = self.count(db)

        return [tuple(row)[:-1] for row in rows], total, params


# =============================================================================
# Factories - one per resource, each declaring its membership path
# =============================================================================


def projects_for(viewer_id: UUID) -> ScopedQuery:
    """Projects the viewer is a member of, with the viewer's is_owner flag.

    Rows: (Project, is_owner)
    """
    stmt = select(Project, ProjectMember.is_owner).join(
        ProjectMember, membership_join(Project.id, viewer_id)
    )
    return ScopedQuery(stmt, order_by=(Project.created_at.asc(), Project.id.asc()))


def libraries_for(viewer_id: UUID) -> ScopedQuery:
    """Libraries whose parent project has the viewer as member.

    Rows: (Library,)
    """
    stmt = select(Library).join(ProjectMember, membership_join(Library.project_id, viewer_id))
    return ScopedQuery(stmt, order_by=(Library.created_at.asc(), Library.id.asc()))


def photos_for(viewer_id: UUID) -> ScopedQuery:
    """Photos whose project has the viewer as member.

    Rows: (Photo,)
    """
    stmt = select(Photo).join(ProjectMember, membership_join(Photo.project_id, viewer_id))
    return ScopedQuery(stmt, order_by=(Photo.filename.asc(), Photo.id.asc()))


def my_reviews_for(viewer_id: UUID) -> ScopedQuery:
    """The viewer's own reviews, restricted to photos in the viewer's projects.

    The membership join is redundant for a reviewer who is still a member,
    but reviews outlive membership, so it is applied explicitly.

    Rows: (PhotoReview,)
    """
    stmt = (
        select(PhotoReview)
        .join(Photo, Photo.id == PhotoReview.photo_id)
        .join(ProjectMember, membership_join(Photo.project_id, viewer_id))
        .where(PhotoReview.user_id == viewer_id)
    )
    return ScopedQuery(stmt, order_by=(PhotoReview.seen_at.desc(), PhotoReview.id.desc()))


def photo_reviews_for(viewer_id: UUID, photo_id: UUID) -> ScopedQuery:
    """All users' reviews of one photo, visible only to members of its project.

    A non-member gets an empty result rather than an error.

    Rows: (PhotoReview,)
    """
    stmt = (
        select(PhotoReview)
        .join(Photo, Photo.id == PhotoReview.photo_id)
        .join(ProjectMember, membership_join(Photo.project_id, viewer_id))
        .where(PhotoReview.photo_id == photo_id)
    )
    return ScopedQuery(stmt, order_by=(PhotoReview.seen_at.desc(), PhotoReview.id.desc()))
