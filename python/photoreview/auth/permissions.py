"""Authorization predicates for visibility and access control.

These predicates are the single source of truth for project membership.
Every other component authorizes through them, either by calling them
directly or by joining on membership_join().

All functions:
- Accept an explicit SQLAlchemy Session
- Return booleans only (no HTTP exceptions)
- Must not leak existence: "not found" and "not visible" both return False
- Hit the database on every call; results are never cached, so a
  membership change is observed by the very next check

Query Semantics:
- A user is a member of a project iff a project_members row exists
- A member is an owner iff that row has is_owner = true
- Libraries, photos and reviews have no membership of their own; they are
  visible through the project_members row of their parent project
"""

from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, and_, exists, select
from sqlalchemy.orm import Session

from photoreview.db.models import ProjectMember


def membership_join(project_id_column: Any, viewer_user_id: UUID) -> ColumnElement[bool]:
    """Join criterion matching the viewer's membership row for a project column.

    Joining ProjectMember on this criterion yields at most one row per
    project (composite primary key), so it filters without duplicating.
    """
    return and_(
        ProjectMember.project_id == project_id_column,
        ProjectMember.user_id == viewer_user_id,
    )


def is_project_member(session: Session, viewer_user_id: UUID, project_id: UUID) -> bool:
    """Check if viewer is a member of a project (owner or not).

    Returns False if project_id does not exist.
    """
    query = select(
        exists().where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == viewer_user_id,
        )
    )
    result = session.execute(query)
    return bool(result.scalar())


def is_project_owner(session: Session, viewer_user_id: UUID, project_id: UUID) -> bool:
    """Check if viewer is an owner of a project.

    True iff viewer_user_id has a membership row in project_id with is_owner = true.
    Returns False if project_id does not exist.
    """
    query = select(
        exists().where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == viewer_user_id,
            ProjectMember.is_owner == True,  # noqa: E712
        )
    )
    result = session.execute(query)
    return bool(result.scalar())
