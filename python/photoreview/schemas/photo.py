"""Photo-related Pydantic schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from photoreview.schemas.base import PatchRequest

__all__ = [
    "CreatePhotoRequest",
    "UpdatePhotoRequest",
    "PhotoOut",
]


class CreatePhotoRequest(BaseModel):
    """Request body for registering a photo in a library."""

    filename: str = Field(..., min_length=1, description="File name as shown to reviewers")
    absolute_path: str = Field(..., min_length=1, description="Location of the original")
    thumbnail_path: str | None = Field(None)
    hash: str | None = Field(None, description="Content hash, if computed")
    metadata: dict[str, Any] | None = Field(None, description="EXIF or other metadata")


class UpdatePhotoRequest(PatchRequest):
    """Request body for updating photo metadata. Omitted fields are unchanged."""

    metadata: dict[str, Any] | None = Field(None)
    thumbnail_path: str | None = Field(None)


class PhotoOut(BaseModel):
    """Response schema for a photo.

    Built explicitly from the ORM row (the ORM attribute is metadata_).
    """

    id: UUID
    project_id: UUID
    library_id: UUID
    filename: str
    absolute_path: str
    thumbnail_path: str | None
    hash: str | None
    metadata: dict[str, Any] | None
    created_at: datetime
