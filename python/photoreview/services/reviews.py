"""Photo review service layer.

Each user keeps at most one review per photo (unique photo_id, user_id).
upsert_review() creates the row on first contact and merges into it after
that, as one INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement. The
unique constraint is the serialization point: of two concurrent first
upserts for the same pair, the second becomes a merge onto the first's row.

Merge rules:
- only fields present in the ReviewPatch are written
- seen_at is refreshed on every call
- decision supplied non-null -> voted_at = now
- decision supplied as None -> voted_at cleared
- decision absent -> voted_at untouched
- library_id is captured from the photo at insert time and never rewritten
"""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from photoreview.db.models import Photo, PhotoReview, utcnow
from photoreview.db.session import transaction
from photoreview.logging import get_logger
from photoreview.schemas.pagination import Page
from photoreview.schemas.review import ReviewOut
from photoreview.services.pagination import build_page
from photoreview.services.patch import ReviewPatch, is_set
from photoreview.services.results import Result, access_denied, not_found, ok
from photoreview.services.scoping import my_reviews_for, photo_reviews_for, photos_for

logger = get_logger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _build_upsert(
    db: Session, values: dict[str, Any], on_conflict_set: dict[str, Any]
) -> Insert:
    dialect = db.get_bind().dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect]
    except KeyError:
        raise ValueError(f"Review upsert has no {dialect!r} dialect insert") from None

    return (
        insert(PhotoReview)
        .values(**values)
        .on_conflict_do_update(index_elements=["photo_id", "user_id"], set_=on_conflict_set)
        .returning(PhotoReview)
    )


def upsert_review(
    db: Session,
    viewer_id: UUID,
    photo_id: UUID,
    patch: ReviewPatch,
    library_id: UUID | None = None,
) -> Result[ReviewOut]:
    """Create or merge the viewer's review of a photo.

    Args:
        db: Database session.
        viewer_id: The reviewing user.
        photo_id: Photo under review.
        patch: Fields to write; absent fields keep their stored value.
        library_id: If given, must equal the photo's library.

    Returns:
        ok(review after the write), access_denied if the viewer is not a
        member of the photo's project (storage untouched), or not_found if
        library_id does not match the photo.
    """
    with transaction(db):
        row = photos_for(viewer_id).where(Photo.id == photo_id).first(db)
        if row is None:
            return access_denied("Not a member of the photo's project")

        photo = row[0]
        if library_id is not None and library_id != photo.library_id:
            return not_found("Photo not found in library")

        now = utcnow()
        fields = patch.supplied()

        values: dict[str, Any] = {
            "id": uuid4(),
            "photo_id": photo.id,
            "user_id": viewer_id,
            "library_id": photo.library_id,
            "seen": fields.get("seen", True),
            "decision": fields.get("decision"),
            "renamed_to": fields.get("renamed_to"),
            "seen_at": now,
            "voted_at": now if fields.get("decision") is not None else None,
        }

        on_conflict_set: dict[str, Any] = {"seen_at": now}
        for name in ("seen", "renamed_to"):
            if name in fields:
                on_conflict_set[name] = fields[name]
        if is_set(patch.decision):
            on_conflict_set["decision"] = patch.decision
            on_conflict_set["voted_at"] = now if patch.decision is not None else None

        stmt = _build_upsert(db, values, on_conflict_set)
        review = db.scalars(stmt, execution_options={"populate_existing": True}).one()

    logger.info(
        "review_upserted",
        photo_id=str(photo_id),
        review_id=str(review.id),
        fields=sorted(fields),
    )
    return ok(ReviewOut.model_validate(review))


def list_my_reviews(
    db: Session,
    viewer_id: UUID,
    *,
    project_id: UUID | None = None,
    library_id: UUID | None = None,
    decision: int | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[ReviewOut]:
    """List the viewer's own reviews within projects the viewer belongs to.

    Ordering: seen_at DESC, id DESC.
    """
    query = my_reviews_for(viewer_id)
    if project_id is not None:
        query = query.where(Photo.project_id == project_id)
    if library_id is not None:
        query = query.where(PhotoReview.library_id == library_id)
    if decision is not None:
        query = query.where(PhotoReview.decision == decision)

    rows, total, params = query.page(db, page, page_size)
    items = [ReviewOut.model_validate(review) for (review,) in rows]
    return build_page(items, total, params.page, params.page_size)


def list_photo_reviews(
    db: Session,
    viewer_id: UUID,
    photo_id: UUID,
    *,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[ReviewOut]:
    """List every user's review of a photo.

    A viewer who is not a member of the photo's project gets an empty page,
    not an error.

    Ordering: seen_at DESC, id DESC.
    """
    rows, total, params = photo_reviews_for(viewer_id, photo_id).page(db, page, page_size)
    items = [ReviewOut.model_validate(review) for (review,) in rows]
    return build_page(items, total, params.page, params.page_size)
