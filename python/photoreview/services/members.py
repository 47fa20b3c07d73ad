"""Project membership service layer.

Every operation here is owner only. A viewer who is not an owner, including
one who cannot see the project at all, gets access_denied.

Removals and demotions go through governance.guard_owner_retained() inside
the same transaction as the mutation, after the project's membership rows
have been locked. Only a viewer who already owns the project gets to take
those locks.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from photoreview.auth.permissions import is_project_owner
from photoreview.db.models import ProjectMember, User
from photoreview.db.session import transaction
from photoreview.logging import get_logger
from photoreview.schemas.project import ProjectMemberOut
from photoreview.services.governance import guard_owner_retained, lock_memberships
from photoreview.services.results import Result, access_denied, not_found, ok

logger = get_logger(__name__)


def _member_out(member: ProjectMember, user: User) -> ProjectMemberOut:
    return ProjectMemberOut(
        project_id=member.project_id,
        user_id=member.user_id,
        name=user.name,
        email=user.email,
        is_owner=member.is_owner,
        created_at=member.created_at,
    )


def _load_member(db: Session, project_id: UUID, user_id: UUID) -> tuple | None:
    return db.execute(
        select(ProjectMember, User)
        .join(User, User.id == ProjectMember.user_id)
        .where(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
    ).first()


def _lock_as_owner(db: Session, viewer_id: UUID, project_id: UUID) -> bool:
    """Lock the project's memberships if the viewer owns it.

    Non-owners are turned away before any row is locked. Ownership is
    re-read under the lock.
    """
    if not is_project_owner(db, viewer_id, project_id):
        return False
    lock_memberships(db, project_id)
    return is_project_owner(db, viewer_id, project_id)


def list_members(db: Session, viewer_id: UUID, project_id: UUID) -> Result[list[ProjectMemberOut]]:
    """List a project's members with their names and emails.

    Ordering: owners first, then created_at ASC, user_id ASC.
    """
    if not is_project_owner(db, viewer_id, project_id):
        return access_denied("Owner access required")

    rows = db.execute(
        select(ProjectMember, User)
        .join(User, User.id == ProjectMember.user_id)
        .where(ProjectMember.project_id == project_id)
        .order_by(
            ProjectMember.is_owner.desc(),
            ProjectMember.created_at.asc(),
            ProjectMember.user_id.asc(),
        )
    ).all()
    return ok([_member_out(member, user) for member, user in rows])


def add_member(
    db: Session, viewer_id: UUID, project_id: UUID, user_id: UUID, is_owner: bool = False
) -> Result[ProjectMemberOut]:
    """Add a user to a project.

    Idempotent: if the user is already a member, the existing row is
    returned unchanged (is_owner is not applied to it).

    Returns:
        ok(member), access_denied if the viewer is not an owner, or
        not_found if user_id does not exist.
    """
    with transaction(db):
        if not is_project_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        user = db.get(User, user_id)
        if user is None:
            return not_found("User not found")

        existing = db.get(ProjectMember, (project_id, user_id))
        if existing is not None:
            return ok(_member_out(existing, user))

        member = ProjectMember(project_id=project_id, user_id=user_id, is_owner=is_owner)
        db.add(member)
        db.flush()

    logger.info(
        "member_added", project_id=str(project_id), user_id=str(user_id), is_owner=is_owner
    )
    return ok(_member_out(member, user))


def remove_member(db: Session, viewer_id: UUID, project_id: UUID, user_id: UUID) -> Result[bool]:
    """Remove a user from a project.

    Refused with invariant_violation when the target is the last owner.
    """
    with transaction(db):
        if not _lock_as_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        guard = guard_owner_retained(db, project_id, user_id)
        if not guard.is_ok:
            return guard

        db.delete(guard.value)
        db.flush()

    logger.info("member_removed", project_id=str(project_id), user_id=str(user_id))
    return ok(True)


def update_member(
    db: Session, viewer_id: UUID, project_id: UUID, user_id: UUID, is_owner: bool
) -> Result[ProjectMemberOut]:
    """Promote or demote a member.

    Demotion is refused with invariant_violation when the target is the
    last owner. Setting the flag to its current value is a no-op.
    """
    with transaction(db):
        if not _lock_as_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        row = _load_member(db, project_id, user_id)
        if row is None:
            return not_found("Member not found")
        member, user = row

        if member.is_owner == is_owner:
            return ok(_member_out(member, user))

        if not is_owner:
            guard = guard_owner_retained(db, project_id, user_id)
            if not guard.is_ok:
                return guard

        member.is_owner = is_owner
        db.flush()

    logger.info(
        "member_updated", project_id=str(project_id), user_id=str(user_id), is_owner=is_owner
    )
    return ok(_member_out(member, user))
