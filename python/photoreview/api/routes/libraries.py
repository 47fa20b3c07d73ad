"""Library routes.

Routes are transport-only:
- Extract viewer_user_id from request.state
- Call exactly one service function
- Return success(...) or raise ApiError (via unwrap_result)

No domain logic or raw DB access in routes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from photoreview.api.deps import PageQuery, PageSizeQuery, get_db
from photoreview.auth.middleware import Viewer, get_viewer
from photoreview.errors import ApiErrorCode
from photoreview.responses import success_response, unwrap_result
from photoreview.schemas.library import CreateLibraryRequest, UpdateLibraryRequest
from photoreview.schemas.photo import CreatePhotoRequest
from photoreview.services import libraries as libraries_service
from photoreview.services import photos as photos_service
from photoreview.services.patch import LibraryPatch

router = APIRouter()


@router.get("/libraries")
def list_libraries(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
    project_id: Annotated[UUID | None, Query(description="Restrict to one project")] = None,
) -> dict:
    """List libraries in the viewer's projects.

    Returns libraries ordered by created_at ASC, id ASC.
    """
    result = libraries_service.list_libraries(
        db, viewer.user_id, project_id=project_id, page=page, page_size=page_size
    )
    return success_response(result.model_dump(mode="json"))


@router.post("/libraries", status_code=201)
def create_library(
    body: CreateLibraryRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a library. Owner of the target project only."""
    result = libraries_service.create_library(
        db,
        viewer.user_id,
        body.project_id,
        body.name,
        body.absolute_path,
        description=body.description,
    )
    library = unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return success_response(library.model_dump(mode="json"))


@router.get("/libraries/{library_id}")
def get_library(
    library_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a library by ID. Non-members get 404."""
    result = libraries_service.get_library(db, viewer.user_id, library_id)
    library = unwrap_result(result, ApiErrorCode.E_LIBRARY_NOT_FOUND)
    return success_response(library.model_dump(mode="json"))


@router.patch("/libraries/{library_id}")
def update_library(
    library_id: UUID,
    body: UpdateLibraryRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update library fields. Owner only; omitted fields are unchanged."""
    result = libraries_service.update_library(
        db, viewer.user_id, library_id, LibraryPatch.from_model(body)
    )
    library = unwrap_result(result, ApiErrorCode.E_LIBRARY_NOT_FOUND)
    return success_response(library.model_dump(mode="json"))


@router.post("/libraries/{library_id}/archive")
def archive_library(
    library_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Archive a library (inactive, completed). Owner only."""
    result = libraries_service.archive_library(db, viewer.user_id, library_id)
    archived = unwrap_result(result, ApiErrorCode.E_LIBRARY_NOT_FOUND)
    return success_response({"archived": archived})


@router.get("/libraries/{library_id}/photos")
def list_library_photos(
    library_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
) -> dict:
    """List the photos of a library, ordered by filename."""
    result = photos_service.list_library_photos(
        db, viewer.user_id, library_id, page=page, page_size=page_size
    )
    return success_response(result.model_dump(mode="json"))


@router.post("/libraries/{library_id}/photos", status_code=201)
def add_photo(
    library_id: UUID,
    body: CreatePhotoRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Register a photo in a library. Owner only."""
    result = photos_service.add_photo(
        db,
        viewer.user_id,
        library_id,
        body.filename,
        body.absolute_path,
        thumbnail_path=body.thumbnail_path,
        hash=body.hash,
        metadata=body.metadata,
    )
    photo = unwrap_result(result, ApiErrorCode.E_LIBRARY_NOT_FOUND)
    return success_response(photo.model_dump(mode="json"))
