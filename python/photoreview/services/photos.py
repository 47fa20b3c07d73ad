"""Photo service layer.

All photo-domain business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Any member of a photo's project can read it and edit its metadata.
Registering new photos requires ownership of the project.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from photoreview.auth.permissions import is_project_owner
from photoreview.db.models import Library, Photo, PhotoReview
from photoreview.db.session import transaction
from photoreview.logging import get_logger
from photoreview.schemas.pagination import Page
from photoreview.schemas.photo import PhotoOut
from photoreview.services.pagination import build_page
from photoreview.services.patch import PhotoPatch
from photoreview.services.results import Result, access_denied, not_found, ok
from photoreview.services.scoping import libraries_for, photos_for

logger = get_logger(__name__)

# Patch field name -> ORM attribute name
_PHOTO_ATTRIBUTES = {"metadata": "metadata_", "thumbnail_path": "thumbnail_path"}


def photo_to_out(photo: Photo) -> PhotoOut:
    """Convert a Photo row to its response schema."""
    return PhotoOut(
        id=photo.id,
        project_id=photo.project_id,
        library_id=photo.library_id,
        filename=photo.filename,
        absolute_path=photo.absolute_path,
        thumbnail_path=photo.thumbnail_path,
        hash=photo.hash,
        metadata=photo.metadata_,
        created_at=photo.created_at,
    )


def list_photos(
    db: Session,
    viewer_id: UUID,
    *,
    project_id: UUID | None = None,
    library_id: UUID | None = None,
    search: str | None = None,
    decision: int | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[PhotoOut]:
    """List photos in the viewer's projects.

    Filters:
        project_id / library_id: restrict to one project or library.
        search: case-insensitive substring match on filename.
        decision: only photos the viewer has reviewed with this decision.
            Other users' reviews never affect the result.

    Ordering: filename ASC, id ASC.
    """
    query = photos_for(viewer_id)
    if project_id is not None:
        query = query.where(Photo.project_id == project_id)
    if library_id is not None:
        query = query.where(Photo.library_id == library_id)
    if search:
        query = query.where(Photo.filename.icontains(search, autoescape=True))
    if decision is not None:
        query = query.join(
            PhotoReview,
            (PhotoReview.photo_id == Photo.id) & (PhotoReview.user_id == viewer_id),
        ).where(PhotoReview.decision == decision)

    rows, total, params = query.page(db, page, page_size)
    items = [photo_to_out(photo) for (photo,) in rows]
    return build_page(items, total, params.page, params.page_size)


def list_library_photos(
    db: Session,
    viewer_id: UUID,
    library_id: UUID,
    *,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[PhotoOut]:
    """List the photos of one library. Empty for libraries the viewer cannot see."""
    return list_photos(db, viewer_id, library_id=library_id, page=page, page_size=page_size)


def get_photo(db: Session, viewer_id: UUID, photo_id: UUID) -> Result[PhotoOut]:
    """Get a photo by id. Non-members get not_found, as for a missing id."""
    row = photos_for(viewer_id).where(Photo.id == photo_id).first(db)
    if row is None:
        return not_found("Photo not found")
    return ok(photo_to_out(row[0]))


def update_photo(
    db: Session, viewer_id: UUID, photo_id: UUID, patch: PhotoPatch
) -> Result[PhotoOut]:
    """Update a photo's metadata and/or thumbnail path. Any member."""
    with transaction(db):
        row = photos_for(viewer_id).where(Photo.id == photo_id).first(db)
        if row is None:
            return not_found("Photo not found")

        photo = row[0]
        for field, value in patch.supplied().items():
            setattr(photo, _PHOTO_ATTRIBUTES[field], value)
        db.flush()

    if not patch.is_empty():
        logger.info("photo_updated", photo_id=str(photo_id), fields=sorted(patch.supplied()))
    return ok(photo_to_out(photo))


def add_photo(
    db: Session,
    viewer_id: UUID,
    library_id: UUID,
    filename: str,
    absolute_path: str,
    *,
    thumbnail_path: str | None = None,
    hash: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Result[PhotoOut]:
    """Register a photo in a library. Owner of the parent project only.

    The photo's project is taken from the library.
    """
    with transaction(db):
        row = libraries_for(viewer_id).where(Library.id == library_id).first(db)
        if row is None:
            return not_found("Library not found")

        library = row[0]
        if not is_project_owner(db, viewer_id, library.project_id):
            return access_denied("Owner access required")

        photo = Photo(
            project_id=library.project_id,
            library_id=library.id,
            filename=filename,
            absolute_path=absolute_path,
            thumbnail_path=thumbnail_path,
            hash=hash,
            metadata_=metadata,
        )
        db.add(photo)
        db.flush()

    logger.info("photo_added", photo_id=str(photo.id), library_id=str(library_id))
    return ok(photo_to_out(photo))
