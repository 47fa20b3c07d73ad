"""Project governance: every project keeps at least one owner.

The owner count and the membership mutation it gates must be evaluated
against one snapshot. Callers open a transaction, call lock_memberships()
first, then guard_owner_retained() before deleting a membership row or
clearing its is_owner flag. The row locks are held until the caller's
transaction ends, so two concurrent demotions of the last two owners are
serialized and the second one observes a single remaining owner.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from photoreview.db.models import ProjectMember
from photoreview.logging import get_logger
from photoreview.services.results import Result, invariant_violation, not_found, ok

logger = get_logger(__name__)


def lock_memberships(db: Session, project_id: UUID) -> list[ProjectMember]:
    """Lock and return every membership row of a project.

    Must be called inside a transaction. Rows already in the session's
    identity map are refreshed from the locked read.
    """
    stmt = (
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(db.scalars(stmt))


def guard_owner_retained(
    db: Session, project_id: UUID, target_user_id: UUID
) -> Result[ProjectMember]:
    """Check that the target membership may lose ownership.

    "Lose ownership" covers both removing the row and demoting it to a
    plain member. Refuses when the target is an owner and the project has
    no other owner.

    Args:
        db: Database session, inside the caller's transaction.
        project_id: Project whose memberships are being changed.
        target_user_id: User whose membership is removed or demoted.

    Returns:
        ok(target membership), not_found if the user is not a member, or
        invariant_violation if the project would be left without an owner.
    """
    members = lock_memberships(db, project_id)

    target = next((m for m in members if m.user_id == target_user_id), None)
    if target is None:
        return not_found("Member not found")

    if target.is_owner:
        owner_count = sum(1 for m in members if m.is_owner)
        if owner_count <= 1:
            logger.info(
                "owner_guard_refused",
                project_id=str(project_id),
                target_user_id=str(target_user_id),
                owner_count=owner_count,
            )
            return invariant_violation("Project must retain at least one owner")

    return ok(target)
