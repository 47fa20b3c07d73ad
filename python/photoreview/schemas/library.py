"""Library-related Pydantic schemas.

Contains request and response models for library endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from photoreview.schemas.base import PatchRequest
from photoreview.schemas.project import WorkStatusValue

__all__ = [
    "CreateLibraryRequest",
    "UpdateLibraryRequest",
    "LibraryOut",
]

# =============================================================================
# Request Schemas
# =============================================================================


class CreateLibraryRequest(BaseModel):
    """Request body for creating a library inside a project."""

    project_id: UUID = Field(..., description="Parent project")
    name: str = Field(..., min_length=1, max_length=255, description="Library name")
    absolute_path: str = Field(..., min_length=1, description="Folder holding the photos")
    description: str | None = Field(None, description="Optional free-form description")


class UpdateLibraryRequest(PatchRequest):
    """Request body for updating a library. Omitted fields are unchanged."""

    non_nullable = ("name", "status", "is_active")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None)
    status: WorkStatusValue | None = Field(None)
    is_active: bool | None = Field(None)


# =============================================================================
# Response Schemas
# =============================================================================


class LibraryOut(BaseModel):
    """Response schema for a library."""

    id: UUID
    name: str
    description: str | None
    absolute_path: str
    project_id: UUID
    status: WorkStatusValue
    is_active: bool
    created_by: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
