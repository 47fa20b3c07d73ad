"""Photo and review routes.

Routes are transport-only:
- Extract viewer_user_id from request.state
- Call exactly one service function
- Return success(...) or raise ApiError (via unwrap_result)

IMPORTANT: /reviews/me is static and lives on its own prefix, so it cannot
be captured by /photos/{photo_id}.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from photoreview.api.deps import PageQuery, PageSizeQuery, get_db
from photoreview.auth.middleware import Viewer, get_viewer
from photoreview.errors import ApiErrorCode
from photoreview.responses import success_response, unwrap_result
from photoreview.schemas.photo import UpdatePhotoRequest
from photoreview.schemas.review import UpsertReviewRequest
from photoreview.services import photos as photos_service
from photoreview.services import reviews as reviews_service
from photoreview.services.patch import PhotoPatch, ReviewPatch

router = APIRouter()


# =============================================================================
# Photos
# =============================================================================


@router.get("/photos")
def list_photos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
    project_id: Annotated[UUID | None, Query()] = None,
    library_id: Annotated[UUID | None, Query()] = None,
    search: Annotated[str | None, Query(description="Filename substring")] = None,
    decision: Annotated[
        int | None, Query(description="Only photos the viewer decided this way (-1 or 1)")
    ] = None,
) -> dict:
    """List photos in the viewer's projects, ordered by filename."""
    result = photos_service.list_photos(
        db,
        viewer.user_id,
        project_id=project_id,
        library_id=library_id,
        search=search,
        decision=decision,
        page=page,
        page_size=page_size,
    )
    return success_response(result.model_dump(mode="json"))


@router.get("/photos/{photo_id}")
def get_photo(
    photo_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a photo by ID. Non-members get 404."""
    result = photos_service.get_photo(db, viewer.user_id, photo_id)
    photo = unwrap_result(result, ApiErrorCode.E_PHOTO_NOT_FOUND)
    return success_response(photo.model_dump(mode="json"))


@router.patch("/photos/{photo_id}")
def update_photo(
    photo_id: UUID,
    body: UpdatePhotoRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update photo metadata or thumbnail path. Any member."""
    result = photos_service.update_photo(
        db, viewer.user_id, photo_id, PhotoPatch.from_model(body)
    )
    photo = unwrap_result(result, ApiErrorCode.E_PHOTO_NOT_FOUND)
    return success_response(photo.model_dump(mode="json"))


# =============================================================================
# Reviews
# =============================================================================


@router.put("/photos/{photo_id}/review")
def upsert_review(
    photo_id: UUID,
    body: UpsertReviewRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create or merge the viewer's review of a photo.

    Non-members get 403. A library_id that does not match the photo gets 404.
    """
    result = reviews_service.upsert_review(
        db,
        viewer.user_id,
        photo_id,
        ReviewPatch.from_model(body),
        library_id=body.library_id,
    )
    review = unwrap_result(result, ApiErrorCode.E_PHOTO_NOT_FOUND)
    return success_response(review.model_dump(mode="json"))


@router.get("/photos/{photo_id}/reviews")
def list_photo_reviews(
    photo_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
) -> dict:
    """List all reviews of a photo. Non-members get an empty page."""
    result = reviews_service.list_photo_reviews(
        db, viewer.user_id, photo_id, page=page, page_size=page_size
    )
    return success_response(result.model_dump(mode="json"))


@router.get("/reviews/me")
def list_my_reviews(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
    project_id: Annotated[UUID | None, Query()] = None,
    library_id: Annotated[UUID | None, Query()] = None,
    decision: Annotated[int | None, Query(description="-1 or 1")] = None,
) -> dict:
    """List the viewer's own reviews, most recently seen first."""
    result = reviews_service.list_my_reviews(
        db,
        viewer.user_id,
        project_id=project_id,
        library_id=library_id,
        decision=decision,
        page=page,
        page_size=page_size,
    )
    return success_response(result.model_dump(mode="json"))
