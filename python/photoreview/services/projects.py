"""Project service layer.

All project-domain business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Visibility: a project is visible only to its members (scoping.projects_for).
Writes (update/archive/delete) require ownership.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from photoreview.auth.permissions import is_project_owner
from photoreview.db.models import Project, ProjectMember, WorkStatus
from photoreview.db.session import transaction
from photoreview.logging import get_logger
from photoreview.schemas.pagination import Page
from photoreview.schemas.project import ProjectOut
from photoreview.services.pagination import build_page
from photoreview.services.patch import ProjectPatch
from photoreview.services.results import Result, access_denied, not_found, ok
from photoreview.services.scoping import projects_for

logger = get_logger(__name__)


def _project_out(project: Project, is_owner: bool) -> ProjectOut:
    return ProjectOut(
        id=project.id,
        name=project.name,
        status=project.status,
        is_active=project.is_active,
        root_path=project.root_path,
        created_by=project.created_by,
        created_at=project.created_at,
        is_owner=is_owner,
    )


def create_project(db: Session, viewer_id: UUID, name: str, root_path: str) -> ProjectOut:
    """Create a project with the viewer as its first owner.

    The project row and the owner membership are written in one
    transaction: both exist afterwards or neither does.

    Args:
        db: Database session.
        viewer_id: The ID of the user creating the project.
        name: Project name.
        root_path: Root folder of the project's photos.

    Returns:
        The created project (is_owner=True).
    """
    with transaction(db):
        project = Project(
            name=name,
            root_path=root_path,
            status=WorkStatus.active.value,
            is_active=True,
            created_by=viewer_id,
        )
        db.add(project)
        db.flush()

        db.add(ProjectMember(project_id=project.id, user_id=viewer_id, is_owner=True))
        db.flush()

    logger.info("project_created", project_id=str(project.id))
    return _project_out(project, is_owner=True)


def list_projects(
    db: Session,
    viewer_id: UUID,
    *,
    status: str | None = None,
    is_active: bool | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[ProjectOut]:
    """List projects the viewer is a member of.

    Ordering: created_at ASC, id ASC.
    """
    query = projects_for(viewer_id)
    if status is not None:
        query = query.where(Project.status == status)
    if is_active is not None:
        query = query.where(Project.is_active == is_active)

    rows, total, params = query.page(db, page, page_size)
    items = [_project_out(project, is_owner) for project, is_owner in rows]
    return build_page(items, total, params.page, params.page_size)


def get_project(db: Session, viewer_id: UUID, project_id: UUID) -> Result[ProjectOut]:
    """Get a project by id. Non-members get not_found, as for a missing id."""
    row = projects_for(viewer_id).where(Project.id == project_id).first(db)
    if row is None:
        return not_found("Project not found")
    project, is_owner = row
    return ok(_project_out(project, is_owner))


def update_project(
    db: Session, viewer_id: UUID, project_id: UUID, patch: ProjectPatch
) -> Result[ProjectOut]:
    """Apply a partial update to a project. Owner only.

    An empty patch returns the current project unchanged.
    """
    with transaction(db):
        if not is_project_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        project = db.get(Project, project_id, with_for_update=True)
        for field, value in patch.supplied().items():
            setattr(project, field, value)
        db.flush()

    if not patch.is_empty():
        logger.info(
            "project_updated", project_id=str(project_id), fields=sorted(patch.supplied())
        )
    return ok(_project_out(project, is_owner=True))


def archive_project(db: Session, viewer_id: UUID, project_id: UUID) -> Result[bool]:
    """Mark a project inactive and completed. Owner only."""
    with transaction(db):
        if not is_project_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        project = db.get(Project, project_id, with_for_update=True)
        project.is_active = False
        project.status = WorkStatus.completed.value
        db.flush()

    logger.info("project_archived", project_id=str(project_id))
    return ok(True)


def delete_project(db: Session, viewer_id: UUID, project_id: UUID) -> Result[bool]:
    """Delete a project. Owner only.

    Libraries, photos, reviews and memberships go with it (ON DELETE CASCADE).
    """
    with transaction(db):
        if not is_project_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        project = db.get(Project, project_id)
        db.delete(project)
        db.flush()

    logger.info("project_deleted", project_id=str(project_id))
    return ok(True)
