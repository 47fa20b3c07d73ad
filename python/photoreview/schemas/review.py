"""Photo review Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from photoreview.schemas.base import PatchRequest

DecisionValue = Literal[-1, 1]

__all__ = [
    "DecisionValue",
    "UpsertReviewRequest",
    "ReviewOut",
]


class UpsertReviewRequest(PatchRequest):
    """Request body for PUT /photos/{id}/review.

    Merge semantics: omitted fields keep their stored value. An explicit
    "decision": null clears the vote; omitting decision leaves it alone.
    """

    non_nullable = ("seen",)

    seen: bool | None = Field(None, description="Whether the photo has been looked at")
    decision: DecisionValue | None = Field(None, description="-1 reject, 1 accept, null undecided")
    renamed_to: str | None = Field(None, description="Proposed new file name")
    library_id: UUID | None = Field(
        None, description="Expected library of the photo; must match when given"
    )


class ReviewOut(BaseModel):
    """Response schema for a photo review."""

    id: UUID
    photo_id: UUID
    user_id: UUID
    library_id: UUID
    seen: bool
    decision: DecisionValue | None
    renamed_to: str | None
    seen_at: datetime
    voted_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
