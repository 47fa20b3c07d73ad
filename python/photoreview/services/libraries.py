"""Library service layer.

All library-domain business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Libraries have no membership of their own. Any member of the parent project
can read them; only owners of the parent project can create, update or
archive them.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from photoreview.auth.permissions import is_project_owner
from photoreview.db.models import Library, WorkStatus
from photoreview.db.session import transaction
from photoreview.logging import get_logger
from photoreview.schemas.library import LibraryOut
from photoreview.schemas.pagination import Page
from photoreview.services.pagination import build_page
from photoreview.services.patch import LibraryPatch
from photoreview.services.results import Result, access_denied, not_found, ok
from photoreview.services.scoping import libraries_for

logger = get_logger(__name__)


def list_libraries(
    db: Session,
    viewer_id: UUID,
    *,
    project_id: UUID | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[LibraryOut]:
    """List libraries in the viewer's projects, optionally for one project.

    Ordering: created_at ASC, id ASC.
    """
    query = libraries_for(viewer_id)
    if project_id is not None:
        query = query.where(Library.project_id == project_id)

    rows, total, params = query.page(db, page, page_size)
    items = [LibraryOut.model_validate(library) for (library,) in rows]
    return build_page(items, total, params.page, params.page_size)


def get_library(db: Session, viewer_id: UUID, library_id: UUID) -> Result[LibraryOut]:
    """Get a library by id. Non-members get not_found, as for a missing id."""
    row = libraries_for(viewer_id).where(Library.id == library_id).first(db)
    if row is None:
        return not_found("Library not found")
    return ok(LibraryOut.model_validate(row[0]))


def create_library(
    db: Session,
    viewer_id: UUID,
    project_id: UUID,
    name: str,
    absolute_path: str,
    description: str | None = None,
) -> Result[LibraryOut]:
    """Create a library in a project. Owner only."""
    with transaction(db):
        if not is_project_owner(db, viewer_id, project_id):
            return access_denied("Owner access required")

        library = Library(
            project_id=project_id,
            name=name,
            absolute_path=absolute_path,
            description=description,
            status=WorkStatus.active.value,
            is_active=True,
            created_by=viewer_id,
        )
        db.add(library)
        db.flush()

    logger.info("library_created", library_id=str(library.id), project_id=str(project_id))
    return ok(LibraryOut.model_validate(library))


def _owned_library(db: Session, viewer_id: UUID, library_id: UUID) -> Result[Library]:
    """Resolve a library for a write.

    not_found when the viewer cannot see it, access_denied when the viewer
    sees it but does not own the parent project.
    """
    row = libraries_for(viewer_id).where(Library.id == library_id).first(db)
    if row is None:
        return not_found("Library not found")
    library = row[0]
    if not is_project_owner(db, viewer_id, library.project_id):
        return access_denied("Owner access required")
    return ok(library)


def update_library(
    db: Session, viewer_id: UUID, library_id: UUID, patch: LibraryPatch
) -> Result[LibraryOut]:
    """Apply a partial update to a library. Owner of the parent project only."""
    with transaction(db):
        resolved = _owned_library(db, viewer_id, library_id)
        if not resolved.is_ok:
            return resolved

        library = resolved.value
        for field, value in patch.supplied().items():
            setattr(library, field, value)
        db.flush()

    if not patch.is_empty():
        logger.info(
            "library_updated", library_id=str(library_id), fields=sorted(patch.supplied())
        )
    return ok(LibraryOut.model_validate(library))


def archive_library(db: Session, viewer_id: UUID, library_id: UUID) -> Result[bool]:
    """Mark a library inactive and completed. Owner of the parent project only."""
    with transaction(db):
        resolved = _owned_library(db, viewer_id, library_id)
        if not resolved.is_ok:
            return resolved

        library = resolved.value
        library.is_active = False
        library.status = WorkStatus.completed.value
        db.flush()

    logger.info("library_archived", library_id=str(library_id))
    return ok(True)
